# services/notification_management/routing.py
import logging

from services.notification_management.models.notifications import NotificationType, canonical_type

logger = logging.getLogger(__name__)

# Where a click on a notification takes its reader.
ROUTES = {
    NotificationType.NEW_ASSESSMENT: "/headteacher/assessments/{assessment_id}",
    NotificationType.ASSESSMENT_UPDATED: "/headteacher/assessments/{assessment_id}",
    NotificationType.ASSESSMENT_APPROVED: "/teacher/assessments/{assessment_id}",
    NotificationType.ASSESSMENT_CHANGES_REQUESTED: "/teacher/assessments/{assessment_id}/edit",
}


def resolve_destination(notification_type, assessment_id):
    """Return the page for a notification, or None when it has nowhere to go."""
    known = canonical_type(notification_type)
    if known is None or known not in ROUTES:
        logger.info("Unknown notification type: %s", notification_type)
        return None
    if assessment_id is None:
        logger.info("Notification of type %s has no assessment to link to", notification_type)
        return None
    return ROUTES[known].format(assessment_id=assessment_id)
