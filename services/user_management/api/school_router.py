# services/user_management/api/school_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.controllers import school_service
from services.user_management.schemas.schools import (
    ClassDetailOut,
    ClassSubjectsAssign,
    SchoolClassCreate,
    SchoolClassOut,
    StudentCreate,
    StudentOut,
    SubjectCreate,
    SubjectOut,
)
from shared.auth import Identity, get_current_identity
from shared.db import get_db
from shared.permissions import Action, authorize

router = APIRouter(prefix="/school", tags=["School"])


# --- ADD CLASS ---
@router.post("/classes", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
async def add_class(
    payload: SchoolClassCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_SCHOOL)
    return await school_service.create_class(db, payload.name, payload.teacher_id)


# --- CLASS WITH SUBJECTS AND STUDENTS ---
@router.get("/classes/{class_id}", response_model=ClassDetailOut)
async def get_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_SCHOOL)
    return await school_service.get_class_detail(db, class_id)


# --- MAP SUBJECTS TO CLASS ---
@router.post("/classes/{class_id}/subjects", response_model=ClassDetailOut)
async def map_subjects_to_class(
    class_id: int,
    payload: ClassSubjectsAssign,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_SCHOOL)
    return await school_service.assign_subjects_to_class(db, class_id, payload.subject_ids)


# --- ADD SUBJECT ---
@router.post("/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
async def add_subject(
    payload: SubjectCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_SCHOOL)
    return await school_service.create_subject(db, payload.name)


# --- REGISTER STUDENT ---
@router.post("/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def register_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_SCHOOL)
    return await school_service.create_student(db, payload.name, payload.class_id)
