"""Pydantic schemas for the dashboard session API."""

from datetime import datetime

from pydantic import BaseModel


class SessionResponse(BaseModel):
    """Who the dashboard's live queries currently run as."""

    uid: str | None = None
    email: str | None = None
    display_name: str | None = None
    is_anonymous: bool = False
    started_at: datetime
    subscriptions: int
