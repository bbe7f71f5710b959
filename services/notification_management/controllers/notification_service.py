# services/notification_management/controllers/notification_service.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.notification_management.models.notifications import Notification, canonical_type
from services.user_management.models.users import User, UserRole
from shared.db import commit_or_raise
from shared.exceptions import AuthorizationError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# Read notifications shown in the live dropdown; the rest live in the history view.
READ_PREVIEW_LIMIT = 5

# Roles whose members share one inbox: every member sees what any member was sent.
BROADCAST_GROUPS = {UserRole.HEADTEACHER}


@dataclass
class NotificationInbox:
    unread: List[Notification] = field(default_factory=list)
    read: List[Notification] = field(default_factory=list)

    @property
    def unread_count(self):
        return len(self.unread)


def _type_value(notification_type):
    known = canonical_type(notification_type)
    if known is not None:
        return known.value
    if not notification_type or not str(notification_type).strip():
        raise ValidationError("Notification type is required")
    return str(notification_type)


# --- CREATE ---
async def notify_users(
    db: AsyncSession,
    user_ids,
    message: str,
    notification_type,
    assessment_id: Optional[int] = None,
) -> List[Notification]:
    """Create one unread notification per recipient in a single commit."""
    if not message or not message.strip():
        raise ValidationError("Notification message is required")
    type_value = _type_value(notification_type)
    user_ids = list(user_ids)

    notifications = [
        Notification(
            user_id=user_id,
            message=message,
            type=type_value,
            read=False,
            assessment_id=assessment_id,
        )
        for user_id in user_ids
    ]
    if not notifications:
        return []

    db.add_all(notifications)
    await commit_or_raise(db, f"creating {type_value} notifications")

    logger.info(
        "Created %d %s notification(s) for users %s (assessment %s)",
        len(notifications), type_value, user_ids, assessment_id,
    )
    return notifications


async def create_notification(
    db: AsyncSession,
    user_id: int,
    message: str,
    notification_type,
    assessment_id: Optional[int] = None,
) -> Notification:
    created = await notify_users(db, [user_id], message, notification_type, assessment_id)
    return created[0]


async def role_member_ids(db: AsyncSession, role: UserRole) -> List[int]:
    try:
        result = await db.execute(select(User.id).where(User.role == role).order_by(User.id))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Storage failure while looking up %s users", role.value)
        raise StorageError(f"Storage failure while looking up {role.value} users: {e.__class__.__name__}") from e
    return list(result.scalars().all())


async def notify_role(db: AsyncSession, role: UserRole, message: str, notification_type, assessment_id=None):
    """Fan out to every user holding `role` right now; later members get nothing retroactively."""
    user_ids = await role_member_ids(db, role)
    if not user_ids:
        logger.warning("No %s users to notify about assessment %s", role.value, assessment_id)
        return []
    return await notify_users(db, user_ids, message, notification_type, assessment_id)


async def notify_first_with_role(db: AsyncSession, role: UserRole, message: str, notification_type, assessment_id=None):
    user_ids = await role_member_ids(db, role)
    if not user_ids:
        logger.warning("No %s user to notify about assessment %s", role.value, assessment_id)
        return []
    return await notify_users(db, user_ids[:1], message, notification_type, assessment_id)


# --- READ ---
async def list_for_user(db: AsyncSession, identity) -> NotificationInbox:
    """Full inbox for the caller, newest first, split into unread and read."""
    stmt = select(Notification)
    if identity.role in BROADCAST_GROUPS:
        stmt = stmt.join(User, User.id == Notification.user_id).where(User.role == identity.role)
    else:
        stmt = stmt.where(Notification.user_id == identity.user_id)
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())

    result = await db.execute(stmt)
    inbox = NotificationInbox()
    for notification in result.scalars().all():
        (inbox.read if notification.read else inbox.unread).append(notification)
    return inbox


async def list_history(db: AsyncSession, user_id: int) -> List[Notification]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def _get_notification(db: AsyncSession, notification_id: int) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError(f"Notification {notification_id} not found")
    return notification


# --- UPDATE / DELETE ---
async def mark_read(db: AsyncSession, notification_id: int) -> Notification:
    notification = await _get_notification(db, notification_id)
    if notification.read:
        return notification

    notification.read = True
    await commit_or_raise(db, f"marking notification {notification_id} as read")
    logger.info("Notification %s marked as read", notification_id)
    return notification


async def delete_notification(db: AsyncSession, notification_id: int, requesting_user_id: int):
    notification = await _get_notification(db, notification_id)
    if notification.user_id != requesting_user_id:
        raise AuthorizationError("Only the recipient may delete this notification")

    await db.delete(notification)
    await commit_or_raise(db, f"deleting notification {notification_id}")
    logger.info("Notification %s deleted by user %s", notification_id, requesting_user_id)
