"""Customer reviews."""

from core.clock import utc_now
from domain.entities.document import Collections
from domain.entities.records import FeedbackRecord
from domain.repositories.live_query import IDocumentStore


class FeedbackService:
    """Service layer for submitting feedback."""

    def __init__(self, store: IDocumentStore) -> None:
        self._store = store

    async def submit(
        self,
        user_id: str,
        customer_name: str | None,
        rating: int,
        comment: str | None = None,
    ) -> FeedbackRecord:
        document = await self._store.add(
            Collections.FEEDBACK,
            {
                "userId": user_id,
                "customerName": customer_name,
                "rating": rating,
                "comment": comment,
                "createdAt": utc_now(),
            },
        )
        return FeedbackRecord.from_document(document)
