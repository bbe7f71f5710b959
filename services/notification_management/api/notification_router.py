# services/notification_management/api/notification_router.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.notification_management.controllers import notification_service
from services.notification_management.schemas.notifications import (
    MarkReadOut,
    NotificationInboxOut,
    NotificationOut,
)
from shared.auth import Identity, get_current_identity
from shared.db import get_db
from shared.permissions import Action, authorize

router = APIRouter(prefix="/notifications", tags=["Notifications"])


# --- POLLED INBOX (unread + read) ---
@router.get("/user", response_model=NotificationInboxOut)
async def get_my_notifications(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    """
    Full inbox, newest first. Headteachers share one inbox.
    Clients show at most `read_preview_limit` read items and link to /history for the rest.
    """
    authorize(identity, Action.VIEW_NOTIFICATIONS)
    inbox = await notification_service.list_for_user(db, identity)
    return NotificationInboxOut(
        unread=[NotificationOut.from_notification(n) for n in inbox.unread],
        read=[NotificationOut.from_notification(n) for n in inbox.read],
        unread_count=inbox.unread_count,
        read_preview_limit=notification_service.READ_PREVIEW_LIMIT,
    )


# --- FULL HISTORY ---
@router.get("/history", response_model=List[NotificationOut])
async def get_notification_history(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_NOTIFICATIONS)
    notifications = await notification_service.list_history(db, identity.user_id)
    return [NotificationOut.from_notification(n) for n in notifications]


# --- MARK READ ---
@router.post("/mark-read/{notification_id}", response_model=MarkReadOut)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_NOTIFICATIONS)
    notification = await notification_service.mark_read(db, notification_id)
    return MarkReadOut(success=True, notification=NotificationOut.from_notification(notification))


# --- DELETE ---
@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    authorize(identity, Action.VIEW_NOTIFICATIONS)
    await notification_service.delete_notification(db, notification_id, identity.user_id)
    return {"success": True}
