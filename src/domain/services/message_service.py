"""Customer chat threads."""

from core.clock import utc_now
from core.exceptions import ChatThreadNotFoundError, DocumentNotFoundError
from domain.entities.document import Collections
from domain.entities.records import ChatThreadRecord
from domain.repositories.live_query import IDocumentStore


class MessageService:
    """Service layer for chat thread summaries."""

    def __init__(self, store: IDocumentStore) -> None:
        self._store = store

    async def post_customer_message(
        self,
        thread_id: str,
        user_id: str,
        user_name: str | None,
        text: str,
    ) -> ChatThreadRecord:
        """Record a new customer message as the thread's unread last message."""
        document = await self._store.merge(
            Collections.CHATS,
            thread_id,
            {
                "userId": user_id,
                "userName": user_name,
                "lastMessage": text,
                "timestamp": utc_now(),
                "isRead": False,
            },
        )
        return ChatThreadRecord.from_document(document)

    async def mark_read(self, thread_id: str) -> ChatThreadRecord:
        """Flag a thread as read by the admin."""
        try:
            document = await self._store.update(Collections.CHATS, thread_id, {"isRead": True})
        except DocumentNotFoundError:
            raise ChatThreadNotFoundError(thread_id) from None
        return ChatThreadRecord.from_document(document)
