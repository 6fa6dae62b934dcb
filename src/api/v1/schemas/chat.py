"""Pydantic schemas for chat thread API."""

from datetime import datetime

from pydantic import BaseModel, Field

from domain.entities.records import ChatThreadRecord


class ChatMessageCreate(BaseModel):
    """A message posted by a customer."""

    text: str = Field(..., min_length=1, max_length=4000)
    user_name: str | None = Field(default=None, max_length=200)


class ChatThreadResponse(BaseModel):
    """Thread summary after the write."""

    id: str
    user_name: str | None = None
    last_message: str | None = None
    timestamp: datetime | None = None
    is_read: bool

    @classmethod
    def from_record(cls, thread: ChatThreadRecord) -> "ChatThreadResponse":
        return cls(
            id=thread.id,
            user_name=thread.user_name,
            last_message=thread.last_message,
            timestamp=thread.timestamp,
            is_read=thread.is_read,
        )
