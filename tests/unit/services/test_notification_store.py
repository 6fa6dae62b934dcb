"""Unit tests for notification feed persistence."""

from datetime import UTC, datetime

import orjson
import pytest

from domain.entities.notification import Notification, NotificationKind
from domain.services.notification_store import (
    NotificationStore,
    deserialize_notifications,
    serialize_notifications,
)

NOW = datetime(2025, 3, 1, 15, 0, tzinfo=UTC)


@pytest.fixture
def store(uow) -> NotificationStore:
    return NotificationStore(lambda: uow, storage_key="notifications")


class TestStoredFormat:
    def test_uses_feed_keys(self):
        raw = serialize_notifications(
            [Notification("order-1", NotificationKind.NEW_ORDER, "New order", NOW, unread=False)]
        )

        entry = orjson.loads(raw)[0]
        assert set(entry) == {"id", "type", "message", "timestamp", "isNew"}
        assert entry["type"] == "new_order"
        assert entry["isNew"] is False

    def test_missing_is_new_reads_as_unread(self):
        raw = '[{"id": "order-1", "type": "new_order", "message": "m"}]'

        [notification] = deserialize_notifications(raw)

        assert notification.unread is True

    def test_skips_malformed_entries(self):
        raw = orjson.dumps(
            [
                "not an object",
                {"type": "new_order", "message": "no id"},
                {"id": "x", "type": "unknown_kind"},
                {"id": "feedback-1", "type": "new_feedback", "isNew": False},
            ]
        ).decode()

        notifications = deserialize_notifications(raw)

        assert [n.id for n in notifications] == ["feedback-1"]
        assert notifications[0].unread is False

    def test_non_list_payload_raises(self):
        with pytest.raises(ValueError):
            deserialize_notifications('{"id": "order-1"}')


class TestLoad:
    @pytest.mark.asyncio
    async def test_absent_key_loads_empty(self, store: NotificationStore):
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_corrupt_value_loads_empty(self, store: NotificationStore, uow):
        uow.local_store.values["notifications"] = "{not json"

        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_read_failure_loads_empty(self, store: NotificationStore, uow):
        uow.local_store.fail_reads = True

        assert await store.load() == []


class TestSave:
    @pytest.mark.asyncio
    async def test_save_then_load(self, store: NotificationStore, uow):
        feed = [
            Notification("order-2", NotificationKind.NEW_ORDER, "two", NOW),
            Notification("order-1", NotificationKind.NEW_ORDER, "one", NOW, unread=False),
        ]

        await store.save(feed)

        assert uow.committed is True
        loaded = await store.load()
        assert [(n.id, n.unread) for n in loaded] == [("order-2", True), ("order-1", False)]
        assert loaded[0].created_at == NOW

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, store: NotificationStore, uow):
        uow.local_store.fail_writes = True

        await store.save([Notification("order-1", NotificationKind.NEW_ORDER, "m", NOW)])
        await store.erase()

        assert uow.local_store.values == {}

    @pytest.mark.asyncio
    async def test_erase_removes_key(self, store: NotificationStore, uow):
        await store.save([Notification("order-1", NotificationKind.NEW_ORDER, "m", NOW)])

        await store.erase()

        assert "notifications" not in uow.local_store.values
