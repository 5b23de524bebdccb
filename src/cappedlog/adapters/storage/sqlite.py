"""SQLite capped list store."""

import time
from collections.abc import Callable

from cappedlog.adapters.storage.sqlite_base import (
    AsyncConnectionManager,
    SyncConnectionManager,
)

_LISTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS list_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    list_key TEXT NOT NULL,
    value TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_list_entries_key_id ON list_entries(list_key, id);
CREATE TABLE IF NOT EXISTS list_expiry (
    list_key TEXT PRIMARY KEY,
    expires_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_list_expiry_expires_at ON list_expiry(expires_at);
"""

# Expired lists are removed for every key, not just the one being written
_PURGE_EXPIRED_ENTRIES = """
DELETE FROM list_entries
WHERE list_key IN (
    SELECT list_key FROM list_expiry WHERE expires_at <= ?
)
"""

_PURGE_EXPIRED_KEYS = """
DELETE FROM list_expiry WHERE expires_at <= ?
"""

_INSERT_ENTRY = """
INSERT INTO list_entries (list_key, value) VALUES (?, ?)
"""

_TRIM_ENTRIES = """
DELETE FROM list_entries
WHERE list_key = ?
AND id NOT IN (
    SELECT id FROM list_entries WHERE list_key = ? ORDER BY id DESC LIMIT ?
)
"""

_SET_EXPIRY = """
INSERT INTO list_expiry (list_key, expires_at) VALUES (?, ?)
ON CONFLICT(list_key) DO UPDATE SET expires_at = excluded.expires_at
"""

_SELECT_RANGE = """
SELECT value FROM list_entries
WHERE list_key = ?
AND NOT EXISTS (
    SELECT 1 FROM list_expiry WHERE list_key = ? AND expires_at <= ?
)
ORDER BY id DESC
LIMIT ? OFFSET ?
"""

_SELECT_EXISTS = """
SELECT 1 FROM list_entries
WHERE list_key = ?
AND NOT EXISTS (
    SELECT 1 FROM list_expiry WHERE list_key = ? AND expires_at <= ?
)
LIMIT 1
"""

_DELETE_ENTRIES = """
DELETE FROM list_entries WHERE list_key = ?
"""

_DELETE_EXPIRY = """
DELETE FROM list_expiry WHERE list_key = ?
"""


def _range_window(start: int, stop: int) -> tuple[int, int] | None:
    """Translate an inclusive start/stop pair into LIMIT and OFFSET."""
    if stop == -1:
        return -1, start
    if stop < start:
        return None
    return stop - start + 1, start


class SQLiteListStore:
    """SQLite implementation of CappedListStorePort.

    Entries live in one table ordered by an autoincrement id; trimming
    keeps the ``limit`` highest ids of a key. Expiry deadlines are wall
    clock times kept in a second table, so they survive restarts.

    Async methods use aiosqlite. Sync methods (push_front_sync, range_sync,
    ...) use the standard sqlite3 module for non-async contexts such as
    logging handlers. For file-based databases both share the same file.
    For :memory: databases, sync and async have separate in-memory DBs.

    Args:
        db_path: Database file path or ":memory:".
        clock: Zero-argument callable returning epoch seconds.
    """

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time) -> None:
        self._db_path = db_path
        self._clock = clock
        self._async_manager = AsyncConnectionManager(db_path, _LISTS_SCHEMA)
        self._sync_manager = SyncConnectionManager(db_path, _LISTS_SCHEMA)

    @property
    def db_path(self) -> str:
        return self._db_path

    async def push_front(self, key: str, value: str, *, limit: int, ttl: int = 0) -> None:
        """Push a value, trim the list and refresh its expiry in one transaction."""
        now = self._clock()
        async with self._async_manager.transaction() as db:
            await db.execute(_PURGE_EXPIRED_ENTRIES, (now,))
            await db.execute(_PURGE_EXPIRED_KEYS, (now,))
            await db.execute(_INSERT_ENTRY, (key, value))
            await db.execute(_TRIM_ENTRIES, (key, key, limit))
            if ttl > 0:
                await db.execute(_SET_EXPIRY, (key, now + ttl))

    async def range(self, key: str, start: int, stop: int) -> list[str]:
        """Return entries start through stop inclusive, newest first."""
        window = _range_window(start, stop)
        if window is None:
            return []
        limit, offset = window
        async with self._async_manager.connection() as db:
            async with db.execute(
                _SELECT_RANGE, (key, key, self._clock(), limit, offset)
            ) as cursor:
                return [row[0] async for row in cursor]

    async def exists(self, key: str) -> bool:
        """Return True if the list has entries and has not expired."""
        async with self._async_manager.connection() as db:
            async with db.execute(_SELECT_EXISTS, (key, key, self._clock())) as cursor:
                return await cursor.fetchone() is not None

    async def delete(self, key: str) -> None:
        """Remove the list and its expiry."""
        async with self._async_manager.transaction() as db:
            await db.execute(_DELETE_ENTRIES, (key,))
            await db.execute(_DELETE_EXPIRY, (key,))

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        await self._async_manager.close()

    # --- Sync methods using standard sqlite3 module ---

    def push_front_sync(
        self, key: str, value: str, *, limit: int, ttl: int = 0
    ) -> None:
        """Synchronous push_front."""
        now = self._clock()
        with self._sync_manager.transaction() as conn:
            conn.execute(_PURGE_EXPIRED_ENTRIES, (now,))
            conn.execute(_PURGE_EXPIRED_KEYS, (now,))
            conn.execute(_INSERT_ENTRY, (key, value))
            conn.execute(_TRIM_ENTRIES, (key, key, limit))
            if ttl > 0:
                conn.execute(_SET_EXPIRY, (key, now + ttl))

    def range_sync(self, key: str, start: int, stop: int) -> list[str]:
        """Synchronous range."""
        window = _range_window(start, stop)
        if window is None:
            return []
        limit, offset = window
        with self._sync_manager.connection() as conn:
            cursor = conn.execute(_SELECT_RANGE, (key, key, self._clock(), limit, offset))
            return [row[0] for row in cursor]

    def exists_sync(self, key: str) -> bool:
        """Synchronous exists."""
        with self._sync_manager.connection() as conn:
            cursor = conn.execute(_SELECT_EXISTS, (key, key, self._clock()))
            return cursor.fetchone() is not None

    def delete_sync(self, key: str) -> None:
        """Synchronous delete."""
        with self._sync_manager.transaction() as conn:
            conn.execute(_DELETE_ENTRIES, (key,))
            conn.execute(_DELETE_EXPIRY, (key,))

    def close_sync(self) -> None:
        """Close the persistent sync connection (for :memory: databases)."""
        self._sync_manager.close()
