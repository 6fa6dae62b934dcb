"""SQLAlchemy implementation of Document repository."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import parse_timestamp
from domain.entities.document import Document, matches, time_field_for
from infrastructure.database.models import DocumentModel


def _to_column_time(value: Any) -> datetime | None:
    parsed = parse_timestamp(value)
    return parsed.astimezone(UTC).replace(tzinfo=None) if parsed else None


class SQLAlchemyDocumentRepository:
    """SQLAlchemy implementation of IDocumentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self,
        collection: str,
        document_id: str,
        for_update: bool = False,
    ) -> Document | None:
        """Get a document by collection and ID, optionally with SELECT ... FOR UPDATE."""
        model = await self._session.get(
            DocumentModel, (collection, document_id), with_for_update=for_update or None
        )
        return self._to_entity(model) if model else None

    async def upsert(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        """Create or replace a document."""
        event_time = _to_column_time(data.get(time_field_for(collection)))
        model = await self._session.get(DocumentModel, (collection, document_id))
        if model is None:
            model = DocumentModel(
                collection=collection,
                id=document_id,
                data=data,
                event_time=event_time,
            )
            self._session.add(model)
        else:
            model.data = data
            model.event_time = event_time
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        stmt = delete(DocumentModel).where(
            DocumentModel.collection == collection,
            DocumentModel.id == document_id,
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)

    async def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> list[Document]:
        """List documents matching field equality filters, ordered by event time.

        Documents without an event time come last.
        """
        order = DocumentModel.event_time.desc() if descending else DocumentModel.event_time.asc()
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.collection == collection)
            .order_by(order.nulls_last(), DocumentModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        documents = [self._to_entity(model) for model in result.scalars()]
        return [d for d in documents if matches(d.data, where)]

    def _to_entity(self, model: DocumentModel) -> Document:
        """Convert ORM model to domain entity."""
        event_time = model.event_time.replace(tzinfo=UTC) if model.event_time else None
        return Document(id=model.id, data=dict(model.data or {}), event_time=event_time)
