# shared/permissions.py
import enum

from shared.exceptions import AuthorizationError
from services.user_management.models.users import UserRole


class Action(str, enum.Enum):
    CREATE_ASSESSMENT = "create_assessment"
    UPDATE_ASSESSMENT = "update_assessment"
    APPROVE_ASSESSMENT = "approve_assessment"
    REQUEST_CHANGES = "request_changes"
    VIEW_ASSESSMENTS = "view_assessments"
    VIEW_NOTIFICATIONS = "view_notifications"
    MANAGE_USERS = "manage_users"
    MANAGE_SCHOOL = "manage_school"
    VIEW_SCHOOL = "view_school"


POLICY = {
    Action.CREATE_ASSESSMENT: {UserRole.TEACHER},
    Action.UPDATE_ASSESSMENT: {UserRole.TEACHER},
    Action.APPROVE_ASSESSMENT: {UserRole.HEADTEACHER},
    Action.REQUEST_CHANGES: {UserRole.HEADTEACHER},
    Action.VIEW_ASSESSMENTS: {UserRole.TEACHER, UserRole.HEADTEACHER, UserRole.ADMIN},
    Action.VIEW_NOTIFICATIONS: {UserRole.TEACHER, UserRole.HEADTEACHER, UserRole.ADMIN},
    Action.MANAGE_USERS: {UserRole.ADMIN},
    Action.MANAGE_SCHOOL: {UserRole.ADMIN},
    Action.VIEW_SCHOOL: {UserRole.TEACHER, UserRole.HEADTEACHER, UserRole.ADMIN},
}


def authorize(identity, action: Action):
    """Single policy check consulted before every operation."""
    if identity.role not in POLICY.get(action, set()):
        raise AuthorizationError(f"Role '{identity.role.value}' may not perform '{action.value}'")


def ensure_class_teacher(identity, school_class):
    if school_class is None or school_class.teacher_id != identity.user_id:
        raise AuthorizationError("You are not the assigned teacher for this class")


def ensure_assessment_author(identity, assessment):
    if assessment.teacher_id != identity.user_id:
        raise AuthorizationError("You can only edit assessments you created")
