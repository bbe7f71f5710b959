# services/user_management/controllers/school_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from services.user_management.models.classes import SchoolClass
from services.user_management.models.students import Student
from services.user_management.models.subjects import Subject
from services.user_management.models.users import User, UserRole
from shared.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def _get_teacher(db: AsyncSession, teacher_id: int) -> User:
    teacher = await db.get(User, teacher_id)
    if not teacher or teacher.role != UserRole.TEACHER:
        raise NotFoundError(f"Teacher {teacher_id} not found")
    return teacher


async def _get_class(db: AsyncSession, class_id: int, with_details=False) -> SchoolClass:
    stmt = select(SchoolClass).where(SchoolClass.id == class_id)
    if with_details:
        stmt = stmt.options(
            selectinload(SchoolClass.subjects),
            selectinload(SchoolClass.students),
        ).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    school_class = result.scalar_one_or_none()
    if school_class is None:
        raise NotFoundError(f"Class {class_id} not found")
    return school_class


# --- ADD CLASS ---
async def create_class(db: AsyncSession, name: str, teacher_id=None) -> SchoolClass:
    if teacher_id is not None:
        await _get_teacher(db, teacher_id)

    existing = await db.execute(select(SchoolClass).where(SchoolClass.name == name))
    if existing.scalars().first():
        raise ValidationError("Class with this name already exists")

    school_class = SchoolClass(name=name, teacher_id=teacher_id)
    db.add(school_class)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Integrity error while creating class")

    logger.info("Created class %s (teacher %s)", name, teacher_id)
    return school_class


# --- ADD SUBJECT ---
async def create_subject(db: AsyncSession, name: str) -> Subject:
    subject = Subject(name=name)
    db.add(subject)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Subject with this name already exists")
    return subject


# --- MAP SUBJECTS TO CLASS ---
async def assign_subjects_to_class(db: AsyncSession, class_id: int, subject_ids) -> SchoolClass:
    """Add subjects to a class; subjects already mapped are skipped."""
    school_class = await _get_class(db, class_id, with_details=True)

    result = await db.execute(select(Subject).where(Subject.id.in_(list(subject_ids))))
    subjects = {subject.id: subject for subject in result.scalars().all()}
    unknown = sorted(set(subject_ids) - set(subjects))
    if unknown:
        raise NotFoundError(f"Subjects {unknown} not found")

    mapped = {subject.id for subject in school_class.subjects}
    for subject_id in subject_ids:
        if subject_id not in mapped:
            school_class.subjects.append(subjects[subject_id])
            mapped.add(subject_id)

    await db.commit()
    return await _get_class(db, class_id, with_details=True)


# --- REGISTER STUDENT ---
async def create_student(db: AsyncSession, name: str, class_id=None) -> Student:
    if class_id is not None:
        await _get_class(db, class_id)

    student = Student(name=name, class_id=class_id)
    db.add(student)
    await db.commit()
    return student


async def get_class_detail(db: AsyncSession, class_id: int) -> SchoolClass:
    return await _get_class(db, class_id, with_details=True)
