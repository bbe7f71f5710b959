# services/notification_management/schemas/notifications.py

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from services.notification_management.routing import resolve_destination


class NotificationOut(BaseModel):
    id: int
    user_id: int
    message: str
    type: str
    read: bool
    assessment_id: Optional[int] = None
    created_at: datetime
    destination: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_notification(cls, notification):
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            message=notification.message,
            type=notification.type,
            read=notification.read,
            assessment_id=notification.assessment_id,
            created_at=notification.created_at,
            destination=resolve_destination(notification.type, notification.assessment_id),
        )


class NotificationInboxOut(BaseModel):
    unread: List[NotificationOut]
    read: List[NotificationOut]
    unread_count: int
    read_preview_limit: int


class MarkReadOut(BaseModel):
    success: bool
    notification: NotificationOut
