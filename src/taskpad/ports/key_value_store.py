"""Key-value store interface."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Interface for whole-blob text persistence by string key."""

    async def load(self, key: str) -> str | None:
        """Return the last value written for key, or None if never written."""
        ...

    async def store(self, key: str, value: str) -> None:
        """Replace the value for key. Raises StorageError on failure."""
        ...
