# services/user_management/models/students.py
from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from shared.db import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    class_id = Column(Integer, ForeignKey("school_classes.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        Index("ix_student_class_id", "class_id"),
    )

    school_class = relationship("SchoolClass", back_populates="students")
