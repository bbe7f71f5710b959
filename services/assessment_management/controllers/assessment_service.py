# services/assessment_management/controllers/assessment_service.py
"""
Assessment lifecycle: pending -> approved | changes-requested, and back to
pending whenever the teacher resubmits.

Every transition is two steps. The assessment write is committed first and is
authoritative; the notification write follows. If the notification step fails
the assessment change stands and the result comes back degraded.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from services.assessment_management.models.assessments import Assessment, AssessmentStatus, SubjectAssessment
from services.assessment_management.validators import (
    check_subject_coverage,
    normalize_subject_comments,
    require_text,
    require_week_number,
)
from services.notification_management.controllers import notification_service
from services.notification_management.models.notifications import NotificationType
from services.user_management.models.classes import SchoolClass
from services.user_management.models.students import Student
from services.user_management.models.users import UserRole
from shared.config import PAST_ASSESSMENTS_PAGE_SIZE
from shared.db import commit_or_raise
from shared.exceptions import InvalidTransitionError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# Approved assessments can only be reopened by the teacher editing them.
ALLOWED_TRANSITIONS = {
    AssessmentStatus.PENDING: {
        AssessmentStatus.PENDING,
        AssessmentStatus.APPROVED,
        AssessmentStatus.CHANGES_REQUESTED,
    },
    AssessmentStatus.CHANGES_REQUESTED: {
        AssessmentStatus.PENDING,
        AssessmentStatus.APPROVED,
        AssessmentStatus.CHANGES_REQUESTED,
    },
    AssessmentStatus.APPROVED: {
        AssessmentStatus.PENDING,
        AssessmentStatus.APPROVED,
    },
}


@dataclass
class TransitionResult:
    assessment: Assessment
    notifications: List = field(default_factory=list)
    notification_error: Optional[str] = None

    @property
    def degraded(self):
        return self.notification_error is not None


@dataclass
class Page:
    items: List[Assessment]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self):
        return math.ceil(self.total / self.page_size) if self.total else 0


def ensure_transition(current: AssessmentStatus, target: AssessmentStatus):
    if target not in ALLOWED_TRANSITIONS[AssessmentStatus(current)]:
        raise InvalidTransitionError(
            f"Cannot move an assessment from '{AssessmentStatus(current).value}' to '{target.value}'"
        )


def _with_details(stmt):
    return stmt.execution_options(populate_existing=True).options(
        selectinload(Assessment.student),
        selectinload(Assessment.teacher),
        selectinload(Assessment.subject_assessments).selectinload(SubjectAssessment.subject),
    )


async def get_assessment(db: AsyncSession, assessment_id: int) -> Assessment:
    """Assessment with student, teacher and subject comments loaded."""
    result = await db.execute(
        _with_details(select(Assessment).where(Assessment.id == assessment_id))
    )
    assessment = result.scalar_one_or_none()
    if assessment is None:
        raise NotFoundError(f"Assessment {assessment_id} not found")
    return assessment


async def get_student(db: AsyncSession, student_id: int) -> Student:
    """Student with class and class subjects loaded."""
    result = await db.execute(
        select(Student)
        .options(selectinload(Student.school_class).selectinload(SchoolClass.subjects))
        .where(Student.id == student_id)
        .execution_options(populate_existing=True)
    )
    student = result.scalar_one_or_none()
    if student is None:
        raise NotFoundError(f"Student {student_id} not found")
    return student


def _class_subject_ids(student: Student) -> List[int]:
    if student.school_class is None:
        raise ValidationError(f"Student {student.name} is not assigned to a class")
    subject_ids = [subject.id for subject in student.school_class.subjects]
    if not subject_ids:
        raise ValidationError(f"Class {student.school_class.name} has no subjects")
    return subject_ids


async def _notify(db: AsyncSession, result: TransitionResult, send):
    """Second step of a transition. A storage failure here degrades, never fails."""
    assessment_id = result.assessment.id
    try:
        result.notifications = await send
    except StorageError as e:
        logger.error("Assessment %s changed but its notification was not stored: %s", assessment_id, e.message)
        result.notification_error = e.message
        # the rollback expired everything in the session
        result.assessment = await get_assessment(db, assessment_id)
    return result


# --- CREATE ---
async def create_assessment(
    db: AsyncSession,
    identity,
    student_id: int,
    date,
    week_number: int,
    summary: str,
    subject_comments,
    assessment_file: Optional[str] = None,
) -> TransitionResult:
    if date is None:
        raise ValidationError("'date' is required")
    require_week_number(week_number)
    require_text(summary, "summary")
    comments = normalize_subject_comments(subject_comments)

    student = await get_student(db, student_id)
    missing = check_subject_coverage(comments, _class_subject_ids(student))
    if missing:
        logger.warning(
            "Assessment for student %s (week %s) has no comment for subjects %s",
            student.id, week_number, missing,
        )

    assessment = Assessment(
        student_id=student.id,
        teacher_id=identity.user_id,
        date=date,
        week_number=week_number,
        summary=summary,
        status=AssessmentStatus.PENDING,
        assessment_file=assessment_file,
        subject_assessments=[
            SubjectAssessment(subject_id=subject_id, comment=comment)
            for subject_id, comment in comments.items()
        ],
    )
    db.add(assessment)
    await commit_or_raise(db, "creating assessment")
    assessment = await get_assessment(db, assessment.id)

    logger.info(
        "Assessment %s created by teacher %s for student %s (week %s)",
        assessment.id, identity.user_id, student.id, week_number,
    )

    result = TransitionResult(assessment=assessment)
    return await _notify(db, result, notification_service.notify_role(
        db,
        UserRole.HEADTEACHER,
        f"New assessment submitted for {student.name} (Week {week_number})",
        NotificationType.NEW_ASSESSMENT,
        assessment.id,
    ))


# --- UPDATE (teacher resubmission) ---
async def update_assessment(
    db: AsyncSession,
    identity,
    assessment_id: int,
    date,
    week_number: int,
    summary: str,
    subject_comments,
    assessment_file: Optional[str] = None,
) -> TransitionResult:
    if date is None:
        raise ValidationError("'date' is required")
    require_week_number(week_number)
    require_text(summary, "summary")
    comments = normalize_subject_comments(subject_comments)

    assessment = await get_assessment(db, assessment_id)
    ensure_transition(assessment.status, AssessmentStatus.PENDING)

    student = await get_student(db, assessment.student_id)
    class_subject_ids = _class_subject_ids(student)
    check_subject_coverage(comments, class_subject_ids)
    commented = set(comments) | {sa.subject_id for sa in assessment.subject_assessments}
    missing = sorted(set(class_subject_ids) - commented)
    if missing:
        logger.warning(
            "Assessment %s (week %s) still has no comment for subjects %s",
            assessment_id, week_number, missing,
        )

    assessment.date = date
    assessment.week_number = week_number
    assessment.summary = summary
    assessment.status = AssessmentStatus.PENDING
    assessment.headteacher_comment = None
    if assessment_file is not None:
        assessment.assessment_file = assessment_file

    existing = {sa.subject_id: sa for sa in assessment.subject_assessments}
    for subject_id, comment in comments.items():
        subject_assessment = existing.get(subject_id)
        if subject_assessment is None:
            assessment.subject_assessments.append(
                SubjectAssessment(subject_id=subject_id, comment=comment)
            )
        elif subject_assessment.comment != comment:
            subject_assessment.comment = comment

    await commit_or_raise(db, f"updating assessment {assessment_id}")
    assessment = await get_assessment(db, assessment_id)

    logger.info("Assessment %s resubmitted by user %s", assessment_id, identity.user_id)

    result = TransitionResult(assessment=assessment)
    return await _notify(db, result, notification_service.notify_first_with_role(
        db,
        UserRole.HEADTEACHER,
        f"Assessment for {assessment.student.name} (Week {week_number}) has been updated and is ready for review",
        NotificationType.ASSESSMENT_UPDATED,
        assessment.id,
    ))


# --- REVIEW ---
async def _review(db, identity, assessment_id, target, headteacher_comment, message_for, notification_type):
    assessment = await get_assessment(db, assessment_id)
    ensure_transition(assessment.status, target)

    assessment.status = target
    assessment.headteacher_comment = headteacher_comment
    await commit_or_raise(db, f"setting assessment {assessment_id} to {target.value}")

    logger.info("Assessment %s set to %s by user %s", assessment_id, target.value, identity.user_id)

    result = TransitionResult(assessment=assessment)
    return await _notify(db, result, notification_service.notify_users(
        db,
        [assessment.teacher_id],
        message_for(assessment),
        notification_type,
        assessment.id,
    ))


async def approve_assessment(
    db: AsyncSession,
    identity,
    assessment_id: int,
    headteacher_comment: Optional[str] = None,
) -> TransitionResult:
    return await _review(
        db, identity, assessment_id,
        AssessmentStatus.APPROVED,
        headteacher_comment,
        lambda a: f"Assessment for {a.student.name} (Week {a.week_number}) has been approved",
        NotificationType.ASSESSMENT_APPROVED,
    )


async def request_changes(db: AsyncSession, identity, assessment_id: int, comment: str) -> TransitionResult:
    require_text(comment, "comment")
    return await _review(
        db, identity, assessment_id,
        AssessmentStatus.CHANGES_REQUESTED,
        comment,
        lambda a: f"Changes requested for {a.student.name}'s assessment (Week {a.week_number})",
        NotificationType.ASSESSMENT_CHANGES_REQUESTED,
    )


# --- QUERIES ---
def _parse_status(status):
    if status is None or isinstance(status, AssessmentStatus):
        return status
    try:
        return AssessmentStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown assessment status: {status!r}")


async def list_assessments(
    db: AsyncSession,
    status=None,
    student_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
) -> List[Assessment]:
    stmt = _with_details(select(Assessment))
    status = _parse_status(status)
    if status is not None:
        stmt = stmt.where(Assessment.status == status)
    if student_id is not None:
        stmt = stmt.where(Assessment.student_id == student_id)
    if teacher_id is not None:
        stmt = stmt.where(Assessment.teacher_id == teacher_id)
    stmt = stmt.order_by(Assessment.created_at.desc(), Assessment.id.desc())

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_past_by_student(db: AsyncSession, student_id: int) -> List[Assessment]:
    if await db.get(Student, student_id) is None:
        raise NotFoundError(f"Student {student_id} not found")

    result = await db.execute(
        _with_details(select(Assessment))
        .where(Assessment.student_id == student_id)
        .order_by(Assessment.week_number.desc(), Assessment.created_at.desc(), Assessment.id.desc())
    )
    return list(result.scalars().all())


async def list_reviewed_page(
    db: AsyncSession,
    page: int = 1,
    page_size: Optional[int] = None,
    status=AssessmentStatus.APPROVED,
) -> Page:
    page_size = page_size or PAST_ASSESSMENTS_PAGE_SIZE
    if page < 1 or page_size < 1:
        raise ValidationError("'page' and 'page_size' must be positive")
    status = _parse_status(status)

    total = await db.scalar(
        select(func.count()).select_from(Assessment).where(Assessment.status == status)
    )
    result = await db.execute(
        _with_details(select(Assessment))
        .where(Assessment.status == status)
        .order_by(Assessment.created_at.desc(), Assessment.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return Page(items=list(result.scalars().all()), page=page, page_size=page_size, total=total or 0)
