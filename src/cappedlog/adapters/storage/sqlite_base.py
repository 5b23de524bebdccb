"""Connection management for SQLite-backed stores."""

import asyncio
import sqlite3
import threading
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import aiosqlite

MEMORY_DB = ":memory:"


class AsyncConnectionManager:
    """Manages async (aiosqlite) database connections.

    Handles schema initialization and connection lifecycle for async contexts.
    For :memory: databases, maintains a persistent connection since SQLite
    in-memory databases are connection-scoped.

    Connections run in autocommit mode; write paths open explicit
    transactions with transaction().
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._initialized = False
        self._init_lock: asyncio.Lock | None = None
        self._write_lock: asyncio.Lock | None = None
        self._persistent_conn: aiosqlite.Connection | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the initialization lock (lazy to avoid event loop issues)."""
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    def _get_write_lock(self) -> asyncio.Lock:
        """Lock serializing transactions on the shared :memory: connection."""
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        return self._write_lock

    @property
    def _is_memory(self) -> bool:
        return self._db_path == MEMORY_DB

    async def _ensure_initialized(self) -> None:
        """Create the schema once."""
        if self._initialized:
            return
        async with self._get_lock():
            if self._initialized:
                return
            if self._is_memory:
                self._persistent_conn = await aiosqlite.connect(
                    MEMORY_DB, isolation_level=None
                )
                await self._persistent_conn.executescript(self._schema)
            else:
                async with aiosqlite.connect(self._db_path, isolation_level=None) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.executescript(self._schema)
            self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection, closing it afterwards unless it is persistent."""
        await self._ensure_initialized()
        if self._is_memory:
            if self._persistent_conn is None:
                raise RuntimeError("Memory database connection not initialized")
            yield self._persistent_conn
            return
        db = await aiosqlite.connect(self._db_path, isolation_level=None)
        try:
            yield db
        finally:
            await db.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection inside BEGIN IMMEDIATE ... COMMIT.

        The transaction is rolled back if the block raises.
        """
        if self._is_memory:
            async with self._get_write_lock():
                async with self._begin() as db:
                    yield db
            return
        async with self._begin() as db:
            yield db

    @asynccontextmanager
    async def _begin(self) -> AsyncIterator[aiosqlite.Connection]:
        async with self.connection() as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                yield db
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        if self._persistent_conn is not None:
            await self._persistent_conn.close()
            self._persistent_conn = None
            self._initialized = False


class SyncConnectionManager:
    """Manages sync (sqlite3) database connections.

    For :memory: databases the persistent connection is shared between
    threads and guarded by a lock.

    IMPORTANT: For :memory: databases, this manager maintains a completely
    separate database instance from AsyncConnectionManager.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._initialized = False
        self._lock = threading.RLock()
        self._persistent_conn: sqlite3.Connection | None = None

    @property
    def _is_memory(self) -> bool:
        return self._db_path == MEMORY_DB

    def _ensure_initialized(self) -> None:
        """Create the schema once."""
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            if self._is_memory:
                self._persistent_conn = sqlite3.connect(
                    MEMORY_DB, isolation_level=None, check_same_thread=False
                )
                self._persistent_conn.executescript(self._schema)
            else:
                db = sqlite3.connect(self._db_path, isolation_level=None)
                try:
                    db.execute("PRAGMA journal_mode=WAL")
                    db.executescript(self._schema)
                finally:
                    db.close()
            self._initialized = True

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, closing it afterwards unless it is persistent."""
        self._ensure_initialized()
        if self._is_memory:
            with self._lock:
                if self._persistent_conn is None:
                    raise RuntimeError(
                        "Sync memory database connection not initialized"
                    )
                yield self._persistent_conn
            return
        conn = sqlite3.connect(self._db_path, isolation_level=None)
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside BEGIN IMMEDIATE ... COMMIT."""
        with self.connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        with self._lock:
            if self._persistent_conn is not None:
                self._persistent_conn.close()
                self._persistent_conn = None
                self._initialized = False
