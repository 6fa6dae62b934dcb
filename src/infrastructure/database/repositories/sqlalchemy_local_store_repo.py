"""SQLAlchemy implementation of the key-value local store."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.models import LocalStoreEntryModel


class SQLAlchemyLocalStoreRepository:
    """SQLAlchemy implementation of ILocalStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: str) -> str | None:
        """Get the value stored under a key."""
        model = await self._session.get(LocalStoreEntryModel, key)
        return model.value if model else None

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        model = await self._session.get(LocalStoreEntryModel, key)
        if model is None:
            self._session.add(LocalStoreEntryModel(key=key, value=value))
        else:
            model.value = value
        await self._session.flush()

    async def remove(self, key: str) -> None:
        """Remove a key if present."""
        await self._session.execute(delete(LocalStoreEntryModel).where(LocalStoreEntryModel.key == key))
