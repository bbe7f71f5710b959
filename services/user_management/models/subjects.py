# services/user_management/models/subjects.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from shared.db import Base
from services.user_management.models.classes import class_subjects


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)  # e.g., "Math", "English"

    classes = relationship("SchoolClass", secondary=class_subjects, back_populates="subjects")
