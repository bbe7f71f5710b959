import services.assessment_management.models  # noqa: F401
from .notifications import Notification, NotificationType, LEGACY_TYPE_ALIASES, canonical_type
