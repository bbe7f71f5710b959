# services/assessment_management/schemas/assessments.py

from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from services.assessment_management.models.assessments import AssessmentStatus


class AssessmentCreate(BaseModel):
    student_id: int
    date: date
    week_number: int = Field(..., gt=0)
    summary: str = Field(..., min_length=1)
    subjects: Dict[int, str] = Field(
        ...,
        description="One comment per subject of the student's class, keyed by subject id",
    )
    assessment_file: Optional[str] = None


class AssessmentUpdate(BaseModel):
    date: date
    week_number: int = Field(..., gt=0)
    summary: str = Field(..., min_length=1)
    subjects: Dict[int, str] = Field(default_factory=dict)
    assessment_file: Optional[str] = None


class ApproveRequest(BaseModel):
    headteacher_comment: Optional[str] = None


class ChangeRequest(BaseModel):
    comment: str = Field(..., min_length=1)


class SubjectCommentOut(BaseModel):
    subject_id: int
    subject_name: Optional[str] = None
    comment: str


class AssessmentOut(BaseModel):
    id: int
    student_id: int
    student_name: Optional[str] = None
    teacher_id: int
    date: date
    week_number: int
    summary: str
    status: AssessmentStatus
    headteacher_comment: Optional[str] = None
    assessment_file: Optional[str] = None
    created_at: datetime
    subject_comments: List[SubjectCommentOut] = []

    @classmethod
    def from_assessment(cls, assessment):
        """Build from an Assessment with student and subject_assessments(.subject) loaded."""
        return cls(
            id=assessment.id,
            student_id=assessment.student_id,
            student_name=assessment.student.name if assessment.student else None,
            teacher_id=assessment.teacher_id,
            date=assessment.date,
            week_number=assessment.week_number,
            summary=assessment.summary,
            status=assessment.status,
            headteacher_comment=assessment.headteacher_comment,
            assessment_file=assessment.assessment_file,
            created_at=assessment.created_at,
            subject_comments=[
                SubjectCommentOut(
                    subject_id=sa.subject_id,
                    subject_name=sa.subject.name if sa.subject else None,
                    comment=sa.comment,
                )
                for sa in assessment.subject_assessments
            ],
        )


class TransitionOut(BaseModel):
    assessment: AssessmentOut
    notifications_sent: int
    degraded: bool = False
    notification_error: Optional[str] = None

    @classmethod
    def from_result(cls, result):
        return cls(
            assessment=AssessmentOut.from_assessment(result.assessment),
            notifications_sent=len(result.notifications),
            degraded=result.degraded,
            notification_error=result.notification_error,
        )


class AssessmentPageOut(BaseModel):
    items: List[AssessmentOut]
    page: int
    page_size: int
    total: int
    total_pages: int
