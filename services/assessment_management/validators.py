# services/assessment_management/validators.py
from shared.exceptions import ValidationError


def require_text(value, field_name):
    if value is None or not str(value).strip():
        raise ValidationError(f"'{field_name}' is required")
    return value


def require_week_number(week_number):
    # bool is an int subclass; reject it explicitly
    if isinstance(week_number, bool) or not isinstance(week_number, int):
        raise ValidationError("'week_number' must be an integer")
    if week_number < 1:
        raise ValidationError("'week_number' must be a positive integer")
    return week_number


def normalize_subject_comments(subject_comments):
    """Return a {subject_id: comment} dict with integer keys and string comments.

    Form posts deliver subject ids as strings ("3"), so numeric strings are accepted.
    """
    if subject_comments is None:
        raise ValidationError("'subjects' is required")
    if not isinstance(subject_comments, dict):
        raise ValidationError("'subjects' must map subject ids to comments")

    normalized = {}
    for raw_id, comment in subject_comments.items():
        try:
            subject_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid subject id: {raw_id!r}")
        if isinstance(raw_id, bool) or subject_id < 1:
            raise ValidationError(f"Invalid subject id: {raw_id!r}")
        if comment is None:
            comment = ""
        if not isinstance(comment, str):
            raise ValidationError(f"Comment for subject {subject_id} must be text")
        if subject_id in normalized:
            raise ValidationError(f"Duplicate comment for subject {subject_id}")
        normalized[subject_id] = comment
    return normalized


def check_subject_coverage(subject_comments, allowed_subject_ids):
    """Split the map against a class's subjects.

    Returns the subject ids of the class that have no comment. Ids outside the
    class are rejected.
    """
    allowed = set(allowed_subject_ids)
    foreign = sorted(set(subject_comments) - allowed)
    if foreign:
        raise ValidationError(f"Subjects {foreign} are not taught in this student's class")
    return sorted(allowed - set(subject_comments))
