"""Document repository protocol."""

from typing import Any, Protocol

from domain.entities.document import Document


class IDocumentRepository(Protocol):
    """Repository interface for schemaless documents grouped by collection."""

    async def get(
        self,
        collection: str,
        document_id: str,
        for_update: bool = False,
    ) -> Document | None:
        """Get a document by collection and ID, optionally locking its row."""
        ...

    async def upsert(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        """Create or replace a document."""
        ...

    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        ...

    async def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> list[Document]:
        """List documents matching field equality filters, ordered by event time."""
        ...
