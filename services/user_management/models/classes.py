# services/user_management/models/classes.py
from sqlalchemy import Column, Integer, String, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from shared.db import Base

class_subjects = Table(
    "class_subjects",
    Base.metadata,
    Column("class_id", Integer, ForeignKey("school_classes.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Integer, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


class SchoolClass(Base):
    __tablename__ = "school_classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)   # E.g., "Class 1A"
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", name="uq_school_class_name"),
    )

    teacher = relationship("User")
    students = relationship("Student", back_populates="school_class")
    subjects = relationship("Subject", secondary=class_subjects, back_populates="classes", order_by="Subject.name")
