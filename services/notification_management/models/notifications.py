# services/notification_management/models/notifications.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from shared.db import Base, utcnow
import enum


class NotificationType(str, enum.Enum):
    NEW_ASSESSMENT = "new_assessment"
    ASSESSMENT_APPROVED = "assessment_approved"
    ASSESSMENT_CHANGES_REQUESTED = "assessment_changes_requested"
    ASSESSMENT_UPDATED = "assessment_updated"


# Older rows were written with this spelling for change requests.
LEGACY_TYPE_ALIASES = {
    "assessment_change_request": NotificationType.ASSESSMENT_CHANGES_REQUESTED,
}


def canonical_type(value):
    """Map a stored type string to its NotificationType, or None if unknown."""
    if isinstance(value, NotificationType):
        return value
    if value in LEGACY_TYPE_ALIASES:
        return LEGACY_TYPE_ALIASES[value]
    try:
        return NotificationType(value)
    except ValueError:
        return None


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(String(500), nullable=False)
    # Plain string so legacy type values can still be read back.
    type = Column(String(50), nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User")
    assessment = relationship("Assessment")

    __table_args__ = (
        Index("idx_notification_user", "user_id"),
        Index("idx_notification_user_read", "user_id", "read"),
    )
