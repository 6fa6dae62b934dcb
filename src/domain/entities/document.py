"""Document store value objects: documents, deltas and snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class Collections:
    """Collection names used by the storefront and the dashboard."""

    ORDERS = "orders"
    CHATS = "chats"
    FEEDBACK = "feedback"


# Field holding each collection's event time. Anything not listed uses "timestamp".
TIME_FIELDS: dict[str, str] = {
    Collections.ORDERS: "timestamp",
    Collections.CHATS: "timestamp",
    Collections.FEEDBACK: "createdAt",
}


def time_field_for(collection: str) -> str:
    """Name of the field that carries a collection's event time."""
    return TIME_FIELDS.get(collection, "timestamp")


class DeltaType(StrEnum):
    """Kind of change delivered by a live query."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Document:
    """A schemaless record in a collection."""

    id: str
    data: dict[str, Any]
    event_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class Delta:
    """One change notification from a live query."""

    type: DeltaType
    document: Document


@dataclass(frozen=True, slots=True)
class Snapshot:
    """A live query delivery: the full matching set plus what changed."""

    documents: list[Document] = field(default_factory=list)
    changes: list[Delta] = field(default_factory=list)


def matches(data: dict[str, Any], where: dict[str, Any] | None) -> bool:
    """Whether ``data`` satisfies every field-equality filter in ``where``."""
    if not where:
        return True
    return all(data.get(key) == value for key, value in where.items())
