"""Key-value local store protocol."""

from typing import Protocol


class ILocalStore(Protocol):
    """String key-value storage used for the notification feed and UI preferences."""

    async def get(self, key: str) -> str | None:
        """Get the value stored under a key, or None if absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...
