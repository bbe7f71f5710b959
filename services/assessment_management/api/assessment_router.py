# services/assessment_management/api/assessment_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.assessment_management.controllers import assessment_service
from services.assessment_management.models.assessments import AssessmentStatus
from services.assessment_management.schemas.assessments import (
    ApproveRequest,
    AssessmentCreate,
    AssessmentOut,
    AssessmentPageOut,
    AssessmentUpdate,
    ChangeRequest,
    TransitionOut,
)
from services.user_management.models.users import UserRole
from shared.auth import Identity, get_current_identity
from shared.db import get_db
from shared.permissions import Action, authorize, ensure_assessment_author, ensure_class_teacher

router = APIRouter(prefix="/assessments", tags=["Assessments"])


# --- TEACHER SUBMITS A WEEKLY ASSESSMENT ---
@router.post("/", response_model=TransitionOut, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    payload: AssessmentCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.CREATE_ASSESSMENT)
    student = await assessment_service.get_student(db, payload.student_id)
    ensure_class_teacher(identity, student.school_class)

    result = await assessment_service.create_assessment(
        db,
        identity,
        student_id=payload.student_id,
        date=payload.date,
        week_number=payload.week_number,
        summary=payload.summary,
        subject_comments=payload.subjects,
        assessment_file=payload.assessment_file,
    )
    return TransitionOut.from_result(result)


# --- LIST ASSESSMENTS ---
@router.get("/", response_model=List[AssessmentOut])
async def list_assessments(
    status: Optional[AssessmentStatus] = Query(None),
    student_id: Optional[int] = Query(None),
    teacher_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_ASSESSMENTS)

    # Teachers only ever see their own submissions
    if identity.role == UserRole.TEACHER:
        teacher_id = identity.user_id

    assessments = await assessment_service.list_assessments(
        db, status=status, student_id=student_id, teacher_id=teacher_id
    )
    return [AssessmentOut.from_assessment(a) for a in assessments]


# --- HEADTEACHER PAST (REVIEWED) ASSESSMENTS ---
@router.get("/reviewed", response_model=AssessmentPageOut)
async def list_reviewed_assessments(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_ASSESSMENTS)
    result = await assessment_service.list_reviewed_page(db, page=page, page_size=page_size)
    return AssessmentPageOut(
        items=[AssessmentOut.from_assessment(a) for a in result.items],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        total_pages=result.total_pages,
    )


# --- PAST ASSESSMENTS FOR ONE STUDENT ---
@router.get("/students/{student_id}/past", response_model=List[AssessmentOut])
async def list_past_assessments_for_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_ASSESSMENTS)
    assessments = await assessment_service.list_past_by_student(db, student_id)
    return [AssessmentOut.from_assessment(a) for a in assessments]


# --- VIEW ONE ---
@router.get("/{assessment_id}", response_model=AssessmentOut)
async def get_assessment(
    assessment_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_ASSESSMENTS)
    assessment = await assessment_service.get_assessment(db, assessment_id)
    if identity.role == UserRole.TEACHER:
        ensure_assessment_author(identity, assessment)
    return AssessmentOut.from_assessment(assessment)


# --- TEACHER EDITS / RESUBMITS ---
@router.put("/{assessment_id}", response_model=TransitionOut)
async def update_assessment(
    assessment_id: int,
    payload: AssessmentUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.UPDATE_ASSESSMENT)
    assessment = await assessment_service.get_assessment(db, assessment_id)
    ensure_assessment_author(identity, assessment)

    result = await assessment_service.update_assessment(
        db,
        identity,
        assessment_id,
        date=payload.date,
        week_number=payload.week_number,
        summary=payload.summary,
        subject_comments=payload.subjects,
        assessment_file=payload.assessment_file,
    )
    return TransitionOut.from_result(result)


# --- HEADTEACHER APPROVES ---
@router.post("/{assessment_id}/approve", response_model=TransitionOut)
async def approve_assessment(
    assessment_id: int,
    payload: ApproveRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.APPROVE_ASSESSMENT)
    result = await assessment_service.approve_assessment(
        db, identity, assessment_id, payload.headteacher_comment
    )
    return TransitionOut.from_result(result)


# --- HEADTEACHER REQUESTS CHANGES ---
@router.post("/{assessment_id}/request-changes", response_model=TransitionOut)
async def request_changes(
    assessment_id: int,
    payload: ChangeRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.REQUEST_CHANGES)
    result = await assessment_service.request_changes(db, identity, assessment_id, payload.comment)
    return TransitionOut.from_result(result)
