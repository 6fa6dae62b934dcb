"""Live query source protocol."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from domain.entities.document import Document, Snapshot

SnapshotListener = Callable[[Snapshot], Awaitable[None]]


class Subscription(Protocol):
    """Handle for an open live query."""

    @property
    def active(self) -> bool:
        """Whether the subscription still delivers snapshots."""
        ...

    def unsubscribe(self) -> None:
        """Stop delivery. Snapshots already being handled may still complete."""
        ...


class ILiveQuerySource(Protocol):
    """A document database with subscribe-to-changes queries."""

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> Subscription:
        """Open a live query.

        The listener first receives every matching document as an insert
        delta, then one snapshot per subsequent change. Documents are ordered
        by event time.
        """
        ...

    async def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> list[Document]:
        """Run a one-shot query."""
        ...

    async def get(self, collection: str, document_id: str) -> Document | None:
        """Fetch a single document."""
        ...


class IDocumentStore(ILiveQuerySource, Protocol):
    """Live query source that also accepts writes and notifies subscribers of them."""

    async def add(
        self,
        collection: str,
        data: dict[str, Any],
        document_id: str | None = None,
    ) -> Document:
        """Create a document, generating an ID when none is given."""
        ...

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        """Create or replace a document."""
        ...

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> Document:
        """Merge fields into an existing document."""
        ...

    async def merge(self, collection: str, document_id: str, fields: dict[str, Any]) -> Document:
        """Merge fields into a document, creating it when absent."""
        ...

    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document."""
        ...
