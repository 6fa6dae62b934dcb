"""Pydantic schemas for Feedback API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FeedbackCreate(BaseModel):
    """A customer review."""

    customer_name: str | None = Field(default=None, max_length=200)
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime | None = None
    customer_name: str | None = None
    rating: int | None = None
    comment: str | None = None
