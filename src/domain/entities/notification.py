"""Notification domain entities and kind constants."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from core.clock import utc_now


class NotificationKind(StrEnum):
    """Source kind a notification was synthesized from."""

    NEW_ORDER = "new_order"
    NEW_MESSAGE = "new_message"
    NEW_FEEDBACK = "new_feedback"


@dataclass
class Notification:
    """An entry in the admin notification feed.

    ``id`` is derived from the source record so re-delivery of the same
    delta maps onto the same entry. ``created_at`` is aggregation time,
    not the source record's time.
    """

    id: str
    kind: NotificationKind
    message: str
    created_at: datetime = field(default_factory=utc_now)
    unread: bool = True
