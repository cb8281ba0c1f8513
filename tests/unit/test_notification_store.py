"""Unit tests for the recipient-scoped notification store."""

import asyncio
import uuid

import pytest

from catalog.kernel.errors import NotFoundError
from catalog.kernel.models.notification import NotificationType
from catalog.notifications.store import NotificationStore


RECIPIENT = uuid.uuid4()
STRANGER = uuid.uuid4()


async def _add(store: NotificationStore, recipient=RECIPIENT, message="Ping", **fields):
    return await store.create(
        recipient_user_id=recipient,
        message=message,
        notification_type=fields.pop("notification_type", NotificationType.COMMENT),
        project_id=fields.pop("project_id", uuid.uuid4()),
        **fields,
    )


class TestCreateAndList:
    """Tests for create and list_by_recipient."""

    async def test_create_populates_id_and_timestamp(self, db_session):
        store = NotificationStore(db_session)
        notification = await _add(store, commenter_name="Dave Reader")

        assert notification.id is not None
        assert notification.created_at is not None
        assert notification.is_read is False
        assert notification.commenter_name == "Dave Reader"

    async def test_list_is_newest_first_and_scoped(self, db_session):
        store = NotificationStore(db_session)
        first = await _add(store, message="first")
        second = await _add(store, message="second")
        await _add(store, recipient=STRANGER, message="not yours")
        await db_session.commit()

        listed = await store.list_by_recipient(RECIPIENT)

        assert [n.id for n in listed] == [second.id, first.id]

    async def test_list_unread_only_and_limit(self, db_session):
        store = NotificationStore(db_session)
        read = await _add(store, message="old")
        await _add(store, message="new-1")
        await _add(store, message="new-2")
        await store.mark_read(read.id, RECIPIENT)

        unread = await store.list_by_recipient(RECIPIENT, unread_only=True)
        limited = await store.list_by_recipient(RECIPIENT, limit=1)

        assert {n.message for n in unread} == {"new-1", "new-2"}
        assert [n.message for n in limited] == ["new-2"]


class TestRecipientScoping:
    """Another recipient's notification behaves like a missing one."""

    async def test_mark_read_for_other_recipient_fails_and_leaves_record(self, db_session):
        store = NotificationStore(db_session)
        notification = await _add(store)

        with pytest.raises(NotFoundError):
            await store.mark_read(notification.id, STRANGER)

        fetched = await store.get(notification.id, RECIPIENT)
        assert fetched.is_read is False

    async def test_get_unknown_id(self, db_session):
        with pytest.raises(NotFoundError):
            await NotificationStore(db_session).get(uuid.uuid4(), RECIPIENT)

    async def test_delete_for_other_recipient_fails(self, db_session):
        store = NotificationStore(db_session)
        notification = await _add(store)

        with pytest.raises(NotFoundError):
            await store.delete(notification.id, STRANGER)

        assert (await store.count(RECIPIENT)).total_count == 1


class TestBulkOperations:
    """Tests for mark_all_read, delete_all and count."""

    async def test_mark_all_read_is_idempotent(self, db_session):
        store = NotificationStore(db_session)
        for _ in range(3):
            await _add(store)
        await _add(store, recipient=STRANGER)

        assert await store.mark_all_read(RECIPIENT) == 3
        assert await store.mark_all_read(RECIPIENT) == 0

        counts = await store.count(RECIPIENT)
        assert counts.unread_count == 0
        assert counts.total_count == 3
        assert (await store.count(STRANGER)).unread_count == 1

    async def test_mark_all_read_only_touches_unread_rows(self, db_session):
        store = NotificationStore(db_session)
        already = await _add(store)
        await _add(store)
        await store.mark_read(already.id, RECIPIENT)

        assert await store.mark_all_read(RECIPIENT) == 1

    async def test_notification_created_after_mark_all_read_stays_unread(self, db_session):
        store = NotificationStore(db_session)
        await _add(store)
        await store.mark_all_read(RECIPIENT)
        late = await _add(store, message="late")

        unread = await store.list_by_recipient(RECIPIENT, unread_only=True)
        assert [n.id for n in unread] == [late.id]

    async def test_mark_all_read_racing_create_leaves_new_row_unread(self, db_session, session_factory):
        await _add(NotificationStore(db_session), message="seen")
        await db_session.commit()
        update_ran = asyncio.Event()

        async def mark_all():
            async with session_factory() as session:
                changed = await NotificationStore(session).mark_all_read(RECIPIENT)
                update_ran.set()
                await asyncio.sleep(0.05)
                await session.commit()
                return changed

        async def create_late():
            await update_ran.wait()
            async with session_factory() as session:
                late = await _add(NotificationStore(session), message="late")
                await session.commit()
                return late

        changed, late = await asyncio.gather(mark_all(), create_late())

        assert changed == 1
        async with session_factory() as session:
            unread = await NotificationStore(session).list_by_recipient(RECIPIENT, unread_only=True)
        assert [n.id for n in unread] == [late.id]

    async def test_delete_and_delete_all(self, db_session):
        store = NotificationStore(db_session)
        doomed = await _add(store)
        await _add(store)
        await _add(store)
        await _add(store, recipient=STRANGER)

        await store.delete(doomed.id, RECIPIENT)
        assert (await store.count(RECIPIENT)).total_count == 2

        assert await store.delete_all(RECIPIENT) == 2
        assert (await store.count(RECIPIENT)).total_count == 0
        assert (await store.count(STRANGER)).total_count == 1

    async def test_count_for_empty_inbox(self, db_session):
        counts = await NotificationStore(db_session).count(uuid.uuid4())
        assert counts.unread_count == 0
        assert counts.total_count == 0
