# services/user_management/api/admin_router.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.controllers import user_service
from services.user_management.schemas.users import ArchivedUserOut, StatisticsOut, UserCreate, UserOut
from shared.auth import Identity, get_current_identity
from shared.db import get_db
from shared.exceptions import ValidationError
from shared.permissions import Action, authorize

router = APIRouter(prefix="/admin", tags=["Admin"])


# --- REGISTER USER ---
@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    return await user_service.create_user(
        db, payload.username, payload.password, payload.role, payload.full_name
    )


@router.get("/users", response_model=List[UserOut])
async def get_users(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    return await user_service.list_users(db)


# --- DELETE (ARCHIVE) USER ---
@router.delete("/users/{user_id}", response_model=ArchivedUserOut)
async def archive_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    if user_id == identity.user_id:
        raise ValidationError("You cannot archive your own account")
    return await user_service.archive_user(db, user_id)


@router.get("/archived-users", response_model=List[ArchivedUserOut])
async def get_archived_users(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    return await user_service.list_archived_users(db)


@router.post("/archived-users/{archived_user_id}/restore", response_model=UserOut)
async def restore_archived_user(
    archived_user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    return await user_service.restore_user(db, archived_user_id)


@router.get("/statistics", response_model=StatisticsOut)
async def get_statistics(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.MANAGE_USERS)
    return await user_service.get_statistics(db)
