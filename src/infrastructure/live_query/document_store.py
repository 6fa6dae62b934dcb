"""Document store with live queries, backed by the SQL documents table.

Writes go through the database and, once committed, are fanned out to the
open subscriptions of the same collection. Writes are serialized, and each
reads the row it replaces inside its own transaction, so concurrent merges
never overwrite each other. Each subscription owns a queue and a worker
task, so listeners run independently of each other and of the writer, and
every listener sees its snapshots in order.
"""

import asyncio
from collections.abc import Callable
from typing import Any
from uuid import uuid4

import orjson
import structlog

from core.exceptions import DocumentNotFoundError
from domain.entities.document import Delta, DeltaType, Document, Snapshot, matches
from domain.repositories.live_query import SnapshotListener
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

# Queue marker for the initial snapshot; resolved against the database at delivery time.
_INITIAL = object()
# Queue marker that stops a worker.
_STOP = object()


def to_json_data(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize document data to plain JSON values (datetimes become ISO strings)."""
    return orjson.loads(orjson.dumps(data, option=orjson.OPT_NAIVE_UTC))


class LiveSubscription:
    """An open live query on one collection."""

    def __init__(
        self,
        store: "LiveDocumentStore",
        collection: str,
        listener: SnapshotListener,
        where: dict[str, Any] | None,
        descending: bool,
    ) -> None:
        self.collection = collection
        self.where = dict(where) if where else None
        self._store = store
        self._listener = listener
        self._descending = descending
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._active = True
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._queue.put_nowait(_INITIAL)
        self._task = asyncio.create_task(self._run())

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._detach(self)
        self._queue.put_nowait(_STOP)

    def enqueue(self, delta: Delta) -> None:
        if self._active:
            self._queue.put_nowait([delta])

    async def join(self) -> None:
        await self._queue.join()

    async def wait_closed(self) -> None:
        if self._task is not None:
            await self._task

    def routes(self, before: Document | None, after: Document | None) -> Delta | None:
        """The delta this subscription sees for a change from ``before`` to ``after``."""
        was_match = before is not None and matches(before.data, self.where)
        if after is not None and matches(after.data, self.where):
            return Delta(DeltaType.UPDATE if was_match else DeltaType.INSERT, after)
        if before is not None and was_match:
            return Delta(DeltaType.DELETE, before)
        return None

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item is _STOP:
                    return
                if not self._active:
                    continue
                documents = await self._store.query(self.collection, self.where, self._descending)
                if item is _INITIAL:
                    changes = [Delta(DeltaType.INSERT, d) for d in documents]
                else:
                    changes = item
                await self._listener(Snapshot(documents=documents, changes=changes))
            except Exception:
                logger.exception("live_query_listener_failed", collection=self.collection)
            finally:
                self._queue.task_done()


class LiveDocumentStore:
    """IDocumentStore over SQLAlchemy with an in-process change feed."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory
        self._subscriptions: dict[str, list[LiveSubscription]] = {}
        self._write_lock = asyncio.Lock()

    # --- Reads ---

    async def get(self, collection: str, document_id: str) -> Document | None:
        async with self._uow_factory() as uow:
            return await uow.documents.get(collection, document_id)

    async def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> list[Document]:
        async with self._uow_factory() as uow:
            return await uow.documents.query(collection, where=where, descending=descending)

    # --- Writes ---

    async def add(
        self,
        collection: str,
        data: dict[str, Any],
        document_id: str | None = None,
    ) -> Document:
        return await self.set(collection, document_id or uuid4().hex, data)

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        payload = to_json_data(data)
        async with self._write_lock, self._uow_factory() as uow:
            before = await uow.documents.get(collection, document_id, for_update=True)
            after = await uow.documents.upsert(collection, document_id, payload)
            await uow.commit()
            self._publish(collection, before, after)
        return after

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> Document:
        return await self._merge(collection, document_id, fields, create=False)

    async def merge(self, collection: str, document_id: str, fields: dict[str, Any]) -> Document:
        return await self._merge(collection, document_id, fields, create=True)

    async def delete(self, collection: str, document_id: str) -> bool:
        async with self._write_lock, self._uow_factory() as uow:
            before = await uow.documents.get(collection, document_id, for_update=True)
            if before is None:
                return False
            await uow.documents.delete(collection, document_id)
            await uow.commit()
            self._publish(collection, before, None)
        return True

    async def _merge(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        create: bool,
    ) -> Document:
        # Read and write share one transaction with the row locked.
        async with self._write_lock, self._uow_factory() as uow:
            before = await uow.documents.get(collection, document_id, for_update=True)
            if before is None and not create:
                raise DocumentNotFoundError(collection, document_id)
            merged = {**(before.data if before else {}), **to_json_data(fields)}
            after = await uow.documents.upsert(collection, document_id, merged)
            await uow.commit()
            self._publish(collection, before, after)
        return after

    # --- Subscriptions ---

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        where: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> LiveSubscription:
        subscription = LiveSubscription(self, collection, listener, where, descending)
        self._subscriptions.setdefault(collection, []).append(subscription)
        subscription.start()
        logger.debug("live_query_subscribed", collection=collection, where=where)
        return subscription

    async def wait_idle(self) -> None:
        """Wait until every queued snapshot has been handled."""
        subscriptions = [s for subs in self._subscriptions.values() for s in subs]
        await asyncio.gather(*(s.join() for s in subscriptions))

    async def close(self) -> None:
        """Unsubscribe everything and wait for the workers to exit."""
        subscriptions = [s for subs in self._subscriptions.values() for s in subs]
        for subscription in subscriptions:
            subscription.unsubscribe()
        await asyncio.gather(*(s.wait_closed() for s in subscriptions))

    def subscription_count(self, collection: str | None = None) -> int:
        if collection is not None:
            return len(self._subscriptions.get(collection, []))
        return sum(len(subs) for subs in self._subscriptions.values())

    def _detach(self, subscription: LiveSubscription) -> None:
        subs = self._subscriptions.get(subscription.collection, [])
        if subscription in subs:
            subs.remove(subscription)

    def _publish(self, collection: str, before: Document | None, after: Document | None) -> None:
        for subscription in list(self._subscriptions.get(collection, [])):
            delta = subscription.routes(before, after)
            if delta is not None:
                subscription.enqueue(delta)
