import datetime

import pytest
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.future import select

from services.assessment_management.controllers import assessment_service
from services.assessment_management.models.assessments import Assessment, SubjectAssessment
from services.notification_management.models.notifications import Notification
from services.user_management.controllers import school_service, user_service
from services.user_management.models.archived_users import ArchivedUser
from services.user_management.models.users import User, UserRole
from shared.auth import decode_token, verify_password
from shared.exceptions import AuthorizationError, NotFoundError, StorageError, ValidationError
from tests.conftest import identity_for


async def _count(db, model):
    return await db.scalar(select(func.count()).select_from(model))


async def test_create_user_hashes_password_and_rejects_duplicates(db, school):
    user = await user_service.create_user(db, "teacher9", "pw123", UserRole.TEACHER)
    assert user.hashed_password != "pw123"
    assert verify_password("pw123", user.hashed_password)

    with pytest.raises(ValidationError):
        await user_service.create_user(db, "teacher9", "other", UserRole.TEACHER)


async def test_authenticate_user_issues_identity_token(db, school):
    user = await user_service.create_user(db, "head9", "pw123", UserRole.HEADTEACHER)

    authenticated, token = await user_service.authenticate_user(db, "head9", "pw123")
    assert authenticated.id == user.id
    payload = decode_token(token)
    assert payload["sub"] == "head9"
    assert payload["user_id"] == user.id
    assert payload["role"] == "headteacher"

    with pytest.raises(AuthorizationError):
        await user_service.authenticate_user(db, "head9", "nope")
    with pytest.raises(AuthorizationError):
        await user_service.authenticate_user(db, "ghost", "pw123")


async def test_archiving_a_teacher_removes_their_work(db, school):
    created = await assessment_service.create_assessment(
        db,
        identity_for(school.teacher),
        student_id=school.student.id,
        date=datetime.date(2024, 9, 2),
        week_number=1,
        summary="Settled in well",
        subject_comments={school.math.id: "Good", school.english.id: "Fine"},
    )
    await assessment_service.approve_assessment(db, identity_for(school.head), created.assessment.id)
    assert await _count(db, Notification) == 3

    archived = await user_service.archive_user(db, school.teacher.id)

    assert archived.username == "teacher1"
    assert archived.role == UserRole.TEACHER
    assert await _count(db, Assessment) == 0
    assert await _count(db, SubjectAssessment) == 0
    assert await _count(db, Notification) == 0
    assert await _count(db, ArchivedUser) == 1
    assert await db.scalar(select(User).where(User.username == "teacher1")) is None


async def test_restore_recreates_the_user(db, school):
    archived = await user_service.archive_user(db, school.other_teacher.id)

    restored = await user_service.restore_user(db, archived.id)
    assert restored.username == "teacher2"
    assert restored.role == UserRole.TEACHER
    assert await user_service.list_archived_users(db) == []


async def test_restore_refuses_a_taken_username(db, school):
    archived = await user_service.archive_user(db, school.other_teacher.id)
    await user_service.create_user(db, "teacher2", "pw", UserRole.TEACHER)

    with pytest.raises(ValidationError):
        await user_service.restore_user(db, archived.id)


async def test_archive_and_restore_missing(db, school):
    with pytest.raises(NotFoundError):
        await user_service.archive_user(db, 999)
    with pytest.raises(NotFoundError):
        await user_service.restore_user(db, 999)


async def test_statistics(db, school):
    await assessment_service.create_assessment(
        db,
        identity_for(school.teacher),
        student_id=school.student.id,
        date=datetime.date(2024, 9, 2),
        week_number=1,
        summary="Settled in well",
        subject_comments={school.math.id: "Good"},
    )
    assert await user_service.get_statistics(db) == {
        "total_users": 5,
        "total_assessments": 1,
        "pending_reviews": 1,
    }


async def test_assign_subjects_skips_existing_mappings(db, school):
    school_class = await school_service.assign_subjects_to_class(
        db, school.class_1a.id, [school.math.id, school.science.id]
    )
    assert [s.name for s in school_class.subjects] == ["English", "Math", "Science"]

    with pytest.raises(NotFoundError):
        await school_service.assign_subjects_to_class(db, school.class_1a.id, [999])
    with pytest.raises(NotFoundError):
        await school_service.assign_subjects_to_class(db, 999, [school.math.id])


async def test_create_class_checks_teacher_and_name(db, school):
    with pytest.raises(NotFoundError):
        await school_service.create_class(db, "Class 3A", school.head.id)
    with pytest.raises(ValidationError):
        await school_service.create_class(db, "Class 1A", school.teacher.id)

    school_class = await school_service.create_class(db, "Class 3A", school.teacher.id)
    detail = await school_service.get_class_detail(db, school_class.id)
    assert detail.subjects == []
    assert detail.students == []


async def test_create_subject_rejects_duplicates(db, school):
    with pytest.raises(ValidationError):
        await school_service.create_subject(db, "Math")


async def test_create_student_requires_existing_class(db, school):
    with pytest.raises(NotFoundError):
        await school_service.create_student(db, "Lost Student", 999)
    student = await school_service.create_student(db, "Amy Lee", school.class_1a.id)
    assert student.class_id == school.class_1a.id


async def _failing_commit():
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


async def test_failed_archive_leaves_the_user_in_place(db, school, monkeypatch):
    monkeypatch.setattr(db, "commit", _failing_commit)
    with pytest.raises(StorageError, match="archiving user"):
        await user_service.archive_user(db, school.other_teacher.id)
    monkeypatch.undo()

    assert await db.scalar(select(User).where(User.username == "teacher2")) is not None
    assert await _count(db, ArchivedUser) == 0


async def test_failed_restore_keeps_the_archive_row(db, school, monkeypatch):
    archived = await user_service.archive_user(db, school.other_teacher.id)

    monkeypatch.setattr(db, "commit", _failing_commit)
    with pytest.raises(StorageError, match="restoring archived user"):
        await user_service.restore_user(db, archived.id)
    monkeypatch.undo()

    assert await _count(db, ArchivedUser) == 1
    assert await db.scalar(select(User).where(User.username == "teacher2")) is None
