"""In-memory capped list store.

Provides bounded in-memory lists that evict their oldest entries when
full and disappear once their time to live has passed. Suitable for
testing and for single-process services that only need recent logs.
"""

import threading
import time
from collections import deque
from collections.abc import Callable


class MemoryListStore:
    """In-memory implementation of CappedListStorePort.

    Each key maps to a deque with the newest entry on the left. Expiry
    deadlines are measured with ``clock``, which defaults to
    ``time.monotonic`` and can be replaced in tests.

    Args:
        clock: Zero-argument callable returning seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lists: dict[str, deque[str]] = {}
        self._deadlines: dict[str, float] = {}
        self._lock = threading.Lock()

    async def push_front(self, key: str, value: str, *, limit: int, ttl: int = 0) -> None:
        """Push a value to the front of the list, trim it and refresh its expiry."""
        self.push_front_sync(key, value, limit=limit, ttl=ttl)

    async def range(self, key: str, start: int, stop: int) -> list[str]:
        """Return entries start through stop inclusive, newest first."""
        return self.range_sync(key, start, stop)

    async def exists(self, key: str) -> bool:
        """Return True if the list exists and has not expired."""
        return self.exists_sync(key)

    async def delete(self, key: str) -> None:
        """Remove the list."""
        self.delete_sync(key)

    def push_front_sync(
        self, key: str, value: str, *, limit: int, ttl: int = 0
    ) -> None:
        """Synchronous push_front."""
        with self._lock:
            self._expire_all()
            entries = self._lists.setdefault(key, deque())
            entries.appendleft(value)
            while len(entries) > limit:
                entries.pop()
            if not entries:
                self._drop(key)
            elif ttl > 0:
                self._deadlines[key] = self._clock() + ttl

    def range_sync(self, key: str, start: int, stop: int) -> list[str]:
        """Synchronous range."""
        with self._lock:
            self._expire(key)
            entries = list(self._lists.get(key, ()))
        if stop == -1:
            return entries[start:]
        return entries[start : stop + 1]

    def exists_sync(self, key: str) -> bool:
        """Synchronous exists."""
        with self._lock:
            self._expire(key)
            return key in self._lists

    def delete_sync(self, key: str) -> None:
        """Synchronous delete."""
        with self._lock:
            self._drop(key)

    def _expire_all(self) -> None:
        now = self._clock()
        expired = [key for key, deadline in self._deadlines.items() if now >= deadline]
        for key in expired:
            self._drop(key)

    def _expire(self, key: str) -> None:
        deadline = self._deadlines.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._drop(key)

    def _drop(self, key: str) -> None:
        self._lists.pop(key, None)
        self._deadlines.pop(key, None)
