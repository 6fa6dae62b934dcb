"""Pydantic schemas for Notification API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from domain.entities.notification import Notification


class NotificationResponse(BaseModel):
    """Single notification in the feed."""

    id: str
    type: str  # new_order, new_message or new_feedback
    message: str
    created_at: datetime
    unread: bool

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            type=notification.kind.value,
            message=notification.message,
            created_at=notification.created_at,
            unread=notification.unread,
        )


class NotificationListResponse(BaseModel):
    """Notification feed, newest first."""

    data: list[NotificationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class UnreadCountResponse(BaseModel):
    """Unread notification count response."""

    count: int


class MarkAllReadResponse(BaseModel):
    """Response for mark-all-read operation."""

    changed: bool
