"""Writes the top-sellers cache document read by the storefront homepage."""

from domain.repositories.live_query import IDocumentStore


class DocumentTopSellersPublisher:
    """ITopSellersPublisher that replaces one fixed document."""

    def __init__(self, store: IDocumentStore, collection: str, document_id: str) -> None:
        self._store = store
        self._collection = collection
        self._document_id = document_id

    async def publish(self, product_names: list[str]) -> None:
        await self._store.set(
            self._collection,
            self._document_id,
            {"productNames": list(product_names)},
        )
