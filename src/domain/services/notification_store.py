"""Persistence of the notification feed in the key-value local store."""

import asyncio
from collections.abc import Callable
from typing import Any

import orjson
import structlog

from core.clock import parse_timestamp, utc_now
from domain.entities.notification import Notification, NotificationKind
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

DEFAULT_STORAGE_KEY = "notifications"


def serialize_notifications(notifications: list[Notification]) -> str:
    """Encode the feed in its stored form (newest first)."""
    payload = [
        {
            "id": n.id,
            "type": n.kind.value,
            "message": n.message,
            "timestamp": n.created_at,
            "isNew": n.unread,
        }
        for n in notifications
    ]
    return orjson.dumps(payload).decode()


def deserialize_notifications(raw: str) -> list[Notification]:
    """Decode a stored feed.

    Raises ``ValueError`` when the payload is not a JSON list. Entries that
    are not objects, lack an id, or carry an unknown kind are skipped. The
    unread flag stays set unless it was stored as exactly ``false``.
    """
    parsed = orjson.loads(raw)
    if not isinstance(parsed, list):
        raise ValueError("stored notifications are not a list")

    notifications: list[Notification] = []
    for entry in parsed:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        try:
            kind = NotificationKind(entry.get("type"))
        except ValueError:
            continue
        notifications.append(
            Notification(
                id=str(entry["id"]),
                kind=kind,
                message=str(entry.get("message") or ""),
                created_at=parse_timestamp(entry.get("timestamp")) or utc_now(),
                unread=entry.get("isNew") is not False,
            )
        )
    return notifications


class NotificationStore:
    """Loads and saves the feed under one local-store key.

    Failures never propagate: a failed load yields an empty feed and a
    failed write is logged and dropped. Writes run one at a time in call
    order, so the stored value follows the latest save.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage_key = storage_key
        self._write_lock = asyncio.Lock()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    async def load(self) -> list[Notification]:
        """Read the persisted feed, or an empty list if absent or unreadable."""
        try:
            async with self._uow_factory() as uow:
                raw = await uow.local_store.get(self._storage_key)
        except Exception:
            logger.exception("notification_load_failed", key=self._storage_key)
            return []

        if raw is None:
            return []

        try:
            return deserialize_notifications(raw)
        except (orjson.JSONDecodeError, ValueError, TypeError):
            logger.exception("notification_parse_failed", key=self._storage_key)
            return []

    async def save(self, notifications: list[Notification]) -> None:
        """Persist the full feed."""
        # Encode before waiting for the lock: this call persists the state it was given.
        payload = serialize_notifications(notifications)
        await self._write(lambda store: store.set(self._storage_key, payload), "save")

    async def erase(self) -> None:
        """Remove the persisted feed."""
        await self._write(lambda store: store.remove(self._storage_key), "erase")

    async def _write(self, operation: Callable[[Any], Any], action: str) -> None:
        async with self._write_lock:
            try:
                async with self._uow_factory() as uow:
                    await operation(uow.local_store)
                    await uow.commit()
            except Exception:
                logger.exception(
                    "notification_persist_failed",
                    key=self._storage_key,
                    action=action,
                )
