"""Port interface for capped list stores.

The device depends only on this protocol, not on concrete stores.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CappedListStorePort(Protocol):
    """Port for a keyed list that is trimmed to a maximum length.

    Adapters implementing this protocol keep the most recently pushed
    value at index 0. Examples: MemoryListStore, SQLiteListStore,
    RedisListStore.

    Every operation has an async form and a ``_sync`` twin for
    non-async contexts such as logging handlers.
    """

    async def push_front(self, key: str, value: str, *, limit: int, ttl: int = 0) -> None:
        """Push a value to the front of the list, trim it and refresh its expiry.

        The three steps are applied as one unit.

        Args:
            key: List name.
            value: Encoded document.
            limit: Number of entries to keep after the push.
            ttl: Seconds until the whole list expires. 0 leaves the
                expiry untouched.
        """
        ...

    async def range(self, key: str, start: int, stop: int) -> list[str]:
        """Return entries ``start`` through ``stop`` inclusive, newest first.

        A ``stop`` of -1 means the end of the list.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Return True if the list exists and has not expired."""
        ...

    async def delete(self, key: str) -> None:
        """Remove the list."""
        ...

    def push_front_sync(
        self, key: str, value: str, *, limit: int, ttl: int = 0
    ) -> None:
        """Synchronous push_front."""
        ...

    def range_sync(self, key: str, start: int, stop: int) -> list[str]:
        """Synchronous range."""
        ...

    def exists_sync(self, key: str) -> bool:
        """Synchronous exists."""
        ...

    def delete_sync(self, key: str) -> None:
        """Synchronous delete."""
        ...
