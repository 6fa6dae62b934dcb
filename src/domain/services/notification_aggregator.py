"""Fan-in of the order, chat and feedback live queries into one notification feed."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from functools import partial

import structlog

from core.clock import utc_now
from domain.entities.document import Collections, Delta, DeltaType, Snapshot
from domain.entities.notification import Notification, NotificationKind
from domain.entities.records import ChatThreadRecord, FeedbackRecord, OrderRecord
from domain.entities.session import AdminSession
from domain.repositories.live_query import ILiveQuerySource, Subscription
from domain.services.notification_store import NotificationStore

logger = structlog.get_logger()

MAX_NOTIFICATIONS = 20

# Collection each kind is read from.
SOURCE_COLLECTIONS: dict[NotificationKind, str] = {
    NotificationKind.NEW_ORDER: Collections.ORDERS,
    NotificationKind.NEW_MESSAGE: Collections.CHATS,
    NotificationKind.NEW_FEEDBACK: Collections.FEEDBACK,
}


def _is_after(event_time: datetime | None, started_at: datetime) -> bool:
    return event_time is not None and event_time > started_at


def build_notification(
    kind: NotificationKind,
    delta: Delta,
    session: AdminSession,
    now: datetime,
) -> Notification | None:
    """Apply the admission filter to a delta and synthesize its notification.

    Returns None when the delta does not qualify: wrong delta type, a record
    not newer than the session start, or (for chats) a thread that is
    already read or has no last message.
    """
    document = delta.document

    if kind is NotificationKind.NEW_ORDER:
        if delta.type is not DeltaType.INSERT:
            return None
        order = OrderRecord.from_document(document)
        if not _is_after(order.timestamp, session.started_at):
            return None
        return Notification(
            id=f"order-{order.id}",
            kind=kind,
            message=f"New order #{order.id[:6]} from {order.customer_name or 'a customer'}.",
            created_at=now,
        )

    if kind is NotificationKind.NEW_MESSAGE:
        if delta.type not in (DeltaType.INSERT, DeltaType.UPDATE):
            return None
        chat = ChatThreadRecord.from_document(document)
        if chat.is_read or not chat.last_message:
            return None
        if chat.timestamp is None or not _is_after(chat.timestamp, session.started_at):
            return None
        millis = int(chat.timestamp.timestamp() * 1000)
        return Notification(
            id=f"chat-{chat.id}-{millis}",
            kind=kind,
            message=f"New message from {chat.user_name or 'a customer'}.",
            created_at=now,
        )

    if kind is NotificationKind.NEW_FEEDBACK:
        if delta.type is not DeltaType.INSERT:
            return None
        feedback = FeedbackRecord.from_document(document)
        if not _is_after(feedback.created_at, session.started_at):
            return None
        rating = feedback.rating if feedback.rating is not None else "?"
        return Notification(
            id=f"feedback-{feedback.id}",
            kind=kind,
            message=(
                f"New {rating}-star review from {feedback.customer_name or 'a customer'}."
            ),
            created_at=now,
        )

    return None


class NotificationAggregator:
    """Deduplicated, capped, persisted notification feed.

    The feed is ordered newest first and never holds more than
    ``max_notifications`` entries or two entries with the same id. Every
    state change is followed by a full save through the store; clearing
    erases the stored copy instead.

    Each mutation checks and updates the in-memory list without awaiting in
    between, so no other mutation can observe it half done.
    """

    def __init__(
        self,
        store: NotificationStore,
        max_notifications: int = MAX_NOTIFICATIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._max = max_notifications
        self._clock = clock
        self._notifications: list[Notification] = []
        self.session_started_at: datetime = clock()

    # --- Read API ---

    @property
    def notifications(self) -> list[Notification]:
        """Current feed, newest first."""
        return list(self._notifications)

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if n.unread)

    # --- Lifecycle ---

    def initialize(self, persisted: list[Notification]) -> None:
        """Adopt a previously persisted feed as the starting state."""
        seen: set[str] = set()
        restored: list[Notification] = []
        for notification in persisted:
            if notification.id in seen:
                continue
            seen.add(notification.id)
            restored.append(notification)
        self._notifications = restored[: self._max]

    async def restore(self) -> None:
        """Load the persisted feed from the store."""
        self.initialize(await self._store.load())
        logger.info("notifications_restored", count=len(self._notifications))

    # --- Mutations ---

    async def insert(self, notification: Notification) -> bool:
        """Prepend a notification unless its id is already in the feed."""
        if any(n.id == notification.id for n in self._notifications):
            return False
        self._notifications = [notification, *self._notifications][: self._max]
        await self._store.save(self._notifications)
        return True

    async def dismiss(self, notification_id: str) -> bool:
        """Remove one notification. Unknown ids are ignored."""
        remaining = [n for n in self._notifications if n.id != notification_id]
        if len(remaining) == len(self._notifications):
            return False
        self._notifications = remaining
        await self._store.save(self._notifications)
        return True

    async def clear_all(self) -> None:
        """Empty the feed and erase its stored copy."""
        self._notifications = []
        await self._store.erase()

    async def mark_all_read(self) -> bool:
        """Clear every unread flag. Does nothing when nothing is unread."""
        if not any(n.unread for n in self._notifications):
            return False
        self._notifications = [
            replace(n, unread=False) if n.unread else n for n in self._notifications
        ]
        await self._store.save(self._notifications)
        return True

    # --- Live query intake ---

    async def on_delta(
        self,
        kind: NotificationKind,
        delta: Delta,
        session: AdminSession,
    ) -> Notification | None:
        """Turn a qualifying delta into a notification and insert it."""
        notification = build_notification(kind, delta, session, self._clock())
        if notification is None:
            return None
        if not await self.insert(notification):
            return None
        logger.debug(
            "notification_created",
            notification_id=notification.id,
            kind=kind.value,
        )
        return notification

    async def handle_snapshot(
        self,
        kind: NotificationKind,
        session: AdminSession,
        snapshot: Snapshot,
    ) -> None:
        for delta in snapshot.changes:
            await self.on_delta(kind, delta, session)

    async def subscribe(
        self,
        source: ILiveQuerySource,
        session: AdminSession,
    ) -> list[Subscription]:
        """Open the three source queries, newest first, bound to ``session``."""
        subscriptions: list[Subscription] = []
        for kind, collection in SOURCE_COLLECTIONS.items():
            subscription = await source.subscribe(
                collection,
                partial(self.handle_snapshot, kind, session),
                descending=True,
            )
            subscriptions.append(subscription)
        return subscriptions
