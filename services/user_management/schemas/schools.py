# services/user_management/schemas/schools.py

from pydantic import BaseModel, Field
from typing import List, Optional


class SchoolClassCreate(BaseModel):
    name: str = Field(..., min_length=1)
    teacher_id: Optional[int] = None


class SchoolClassOut(BaseModel):
    id: int
    name: str
    teacher_id: Optional[int] = None

    class Config:
        from_attributes = True


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1)


class SubjectOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class ClassSubjectsAssign(BaseModel):
    subject_ids: List[int]


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    class_id: Optional[int] = None


class StudentOut(BaseModel):
    id: int
    name: str
    class_id: Optional[int] = None

    class Config:
        from_attributes = True


class ClassDetailOut(BaseModel):
    id: int
    name: str
    teacher_id: Optional[int] = None
    subjects: List[SubjectOut]
    students: List[StudentOut]

    class Config:
        from_attributes = True
