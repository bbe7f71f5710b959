# services/user_management/controllers/user_service.py
import logging

from sqlalchemy import delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.assessment_management.models.assessments import Assessment, AssessmentStatus
from services.notification_management.models.notifications import Notification
from services.user_management.models.archived_users import ArchivedUser
from services.user_management.models.users import User
from shared.auth import Identity, create_identity_token, get_password_hash, verify_password
from shared.db import commit_or_raise
from shared.exceptions import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# --- LOGIN ---
async def authenticate_user(db: AsyncSession, username: str, password: str):
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()

    if not user or not verify_password(password, user.hashed_password):
        raise AuthorizationError("Invalid credentials")

    identity = Identity(user_id=user.id, username=user.username, role=user.role)
    logger.info("User %s logged in as %s", user.username, user.role.value)
    return user, create_identity_token(identity)


# --- USERS ---
async def create_user(db: AsyncSession, username: str, password: str, role, full_name=None) -> User:
    existing = await db.execute(select(User).where(User.username == username))
    if existing.scalars().first():
        raise ValidationError("User with this username already exists")

    user = User(
        username=username,
        full_name=full_name,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Integrity error while creating user")

    logger.info("Created %s user %s", user.role.value, user.username)
    return user


async def list_users(db: AsyncSession):
    result = await db.execute(select(User).order_by(User.role, User.username))
    return list(result.scalars().all())


async def archive_user(db: AsyncSession, user_id: int) -> ArchivedUser:
    """Snapshot the user, then delete them with their notifications and authored assessments."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    archived = ArchivedUser(
        username=user.username,
        full_name=user.full_name,
        role=user.role,
        hashed_password=user.hashed_password,
    )
    db.add(archived)

    authored = select(Assessment.id).where(Assessment.teacher_id == user_id)
    await db.execute(
        delete(Notification).where(
            or_(Notification.user_id == user_id, Notification.assessment_id.in_(authored))
        )
    )
    # ORM delete so subject comments cascade
    assessments = await db.execute(select(Assessment).where(Assessment.teacher_id == user_id))
    for assessment in assessments.scalars().all():
        await db.delete(assessment)
    await db.delete(user)

    await commit_or_raise(db, f"archiving user {user_id}")
    logger.info("Archived user %s (%s)", archived.username, archived.role.value)
    return archived


async def restore_user(db: AsyncSession, archived_user_id: int) -> User:
    archived = await db.get(ArchivedUser, archived_user_id)
    if archived is None:
        raise NotFoundError(f"Archived user {archived_user_id} not found")

    taken = await db.execute(select(User).where(User.username == archived.username))
    if taken.scalars().first():
        raise ValidationError(f"Username {archived.username} is already in use")

    user = User(
        username=archived.username,
        full_name=archived.full_name,
        role=archived.role,
        hashed_password=archived.hashed_password,
    )
    db.add(user)
    await db.delete(archived)
    await commit_or_raise(db, f"restoring archived user {archived_user_id}")

    logger.info("Restored user %s", user.username)
    return user


async def list_archived_users(db: AsyncSession):
    result = await db.execute(select(ArchivedUser).order_by(ArchivedUser.archived_at.desc()))
    return list(result.scalars().all())


async def get_statistics(db: AsyncSession) -> dict:
    return {
        "total_users": await db.scalar(select(func.count()).select_from(User)),
        "total_assessments": await db.scalar(select(func.count()).select_from(Assessment)),
        "pending_reviews": await db.scalar(
            select(func.count()).select_from(Assessment).where(Assessment.status == AssessmentStatus.PENDING)
        ),
    }
