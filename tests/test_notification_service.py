import pytest
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.future import select

from services.notification_management.controllers import notification_service
from services.notification_management.models.notifications import Notification, NotificationType
from services.user_management.models.users import UserRole
from shared.exceptions import AuthorizationError, NotFoundError, StorageError, ValidationError
from tests.conftest import identity_for


async def test_create_notification_defaults_to_unread(db, school):
    notification = await notification_service.create_notification(
        db, school.teacher.id, "Hello", NotificationType.ASSESSMENT_APPROVED
    )
    assert notification.id is not None
    assert notification.read is False
    assert notification.type == "assessment_approved"
    assert notification.assessment_id is None


async def test_legacy_change_request_type_is_stored_canonically(db, school):
    notification = await notification_service.create_notification(
        db, school.teacher.id, "Changes please", "assessment_change_request"
    )
    assert notification.type == "assessment_changes_requested"


async def test_notification_requires_message(db, school):
    with pytest.raises(ValidationError):
        await notification_service.create_notification(db, school.teacher.id, "", "new_assessment")


async def test_notify_role_fans_out_once_per_member(db, school):
    sent = await notification_service.notify_role(
        db, UserRole.HEADTEACHER, "New assessment", NotificationType.NEW_ASSESSMENT, None
    )
    assert sorted(n.user_id for n in sent) == sorted([school.head.id, school.deputy_head.id])


async def test_notify_first_with_role_picks_one(db, school):
    sent = await notification_service.notify_first_with_role(
        db, UserRole.HEADTEACHER, "Updated", NotificationType.ASSESSMENT_UPDATED, None
    )
    assert [n.user_id for n in sent] == [school.head.id]


async def test_teacher_inbox_only_holds_own_notifications(db, school):
    await notification_service.create_notification(db, school.teacher.id, "for me", "assessment_approved")
    await notification_service.create_notification(db, school.other_teacher.id, "not for me", "assessment_approved")

    inbox = await notification_service.list_for_user(db, identity_for(school.teacher))
    assert [n.message for n in inbox.unread] == ["for me"]
    assert inbox.read == []


async def test_headteachers_share_one_inbox(db, school):
    await notification_service.create_notification(db, school.head.id, "to head", "new_assessment")
    await notification_service.create_notification(db, school.deputy_head.id, "to deputy", "new_assessment")
    await notification_service.create_notification(db, school.teacher.id, "to teacher", "assessment_approved")

    for head in (school.head, school.deputy_head):
        inbox = await notification_service.list_for_user(db, identity_for(head))
        assert [n.message for n in inbox.unread] == ["to deputy", "to head"]

    # history stays per recipient
    history = await notification_service.list_history(db, school.head.id)
    assert [n.message for n in history] == ["to head"]


async def test_inbox_is_partitioned_and_newest_first(db, school):
    created = []
    for i in range(8):
        created.append(
            await notification_service.create_notification(db, school.teacher.id, f"n{i}", "assessment_approved")
        )
    for notification in created[:7]:
        await notification_service.mark_read(db, notification.id)

    inbox = await notification_service.list_for_user(db, identity_for(school.teacher))
    assert [n.message for n in inbox.unread] == ["n7"]
    # the dispatcher never truncates; READ_PREVIEW_LIMIT is for views
    assert [n.message for n in inbox.read] == [f"n{i}" for i in range(6, -1, -1)]
    assert len(inbox.read) > notification_service.READ_PREVIEW_LIMIT
    assert inbox.unread_count == 1


async def test_mark_read_is_idempotent(db, school):
    notification = await notification_service.create_notification(
        db, school.teacher.id, "Hello", "assessment_approved"
    )
    first = await notification_service.mark_read(db, notification.id)
    second = await notification_service.mark_read(db, notification.id)
    assert first.read is True
    assert second.read is True


async def test_mark_read_missing(db, school):
    with pytest.raises(NotFoundError):
        await notification_service.mark_read(db, 12345)


async def test_only_the_recipient_can_delete(db, school):
    notification = await notification_service.create_notification(
        db, school.teacher.id, "Mine", "assessment_approved"
    )

    with pytest.raises(AuthorizationError):
        await notification_service.delete_notification(db, notification.id, school.other_teacher.id)
    still_there = await db.get(Notification, notification.id)
    assert still_there is not None
    assert still_there.read is False

    await notification_service.delete_notification(db, notification.id, school.teacher.id)
    assert await db.scalar(select(func.count()).select_from(Notification)) == 0

    with pytest.raises(NotFoundError):
        await notification_service.delete_notification(db, notification.id, school.teacher.id)


async def test_headteacher_cannot_delete_a_colleagues_notification(db, school):
    notification = await notification_service.create_notification(
        db, school.deputy_head.id, "Deputy's", "new_assessment"
    )
    with pytest.raises(AuthorizationError):
        await notification_service.delete_notification(db, notification.id, school.head.id)


async def test_storage_failure_is_reported_and_rolled_back(db, school, monkeypatch):
    async def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(StorageError):
        await notification_service.create_notification(db, school.teacher.id, "Lost", "assessment_approved")

    monkeypatch.undo()
    assert await db.scalar(select(func.count()).select_from(Notification)) == 0


async def test_failed_recipient_lookup_is_a_storage_error(db, school, monkeypatch):
    async def failing_execute(*args, **kwargs):
        raise OperationalError("SELECT users.id FROM users", {}, Exception("connection reset"))

    monkeypatch.setattr(db, "execute", failing_execute)

    with pytest.raises(StorageError, match="looking up headteacher users"):
        await notification_service.notify_role(
            db, UserRole.HEADTEACHER, "New assessment", NotificationType.NEW_ASSESSMENT, None
        )
