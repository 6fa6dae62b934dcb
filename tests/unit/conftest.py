"""Shared fixtures for unit tests."""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.document import Delta, Document, Snapshot, matches
from domain.entities.session import AdminSession, Identity

SESSION_START = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FakeLocalStore:
    """Dict-backed local store that can be told to fail."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[str | None] = []

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.values[key] = value
        self.writes.append(value)

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.values.pop(key, None)
        self.writes.append(None)


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked document repository and a dict local store."""

    def __init__(self) -> None:
        self.documents = AsyncMock()
        self.local_store = FakeLocalStore()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeSubscription:
    def __init__(self, collection: str, listener: Any, where: dict[str, Any] | None) -> None:
        self.collection = collection
        self.listener = listener
        self.where = where
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeLiveQuerySource:
    """In-memory live query source; tests push deltas with ``emit``."""

    def __init__(self) -> None:
        self.documents: dict[str, list[Document]] = {}
        self.subscriptions: list[FakeSubscription] = []
        self.query_error: Exception | None = None

    async def subscribe(
        self,
        collection: str,
        listener: Any,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> FakeSubscription:
        subscription = FakeSubscription(collection, listener, where)
        self.subscriptions.append(subscription)
        return subscription

    async def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> list[Document]:
        if self.query_error is not None:
            raise self.query_error
        return [d for d in self.documents.get(collection, []) if matches(d.data, where)]

    async def get(self, collection: str, document_id: str) -> Document | None:
        for document in self.documents.get(collection, []):
            if document.id == document_id:
                return document
        return None

    def active(self, collection: str | None = None) -> list[FakeSubscription]:
        return [
            s
            for s in self.subscriptions
            if s.active and (collection is None or s.collection == collection)
        ]

    async def emit(self, collection: str, *changes: Delta) -> None:
        """Deliver a snapshot with ``changes`` to every active subscription."""
        documents = list(self.documents.get(collection, []))
        for subscription in self.active(collection):
            await subscription.listener(Snapshot(documents=documents, changes=list(changes)))


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def source() -> FakeLiveQuerySource:
    return FakeLiveQuerySource()


@pytest.fixture
def session() -> AdminSession:
    """An admin session that started at ``SESSION_START``."""
    return AdminSession(identity=Identity(uid="admin-1"), started_at=SESSION_START)
