"""Redis capped list store.

Uses a Redis list as a fixed-size ring buffer: LPUSH puts the newest
entry at the head, LTRIM drops everything past the limit and EXPIRE
refreshes the time to live. The three commands run in one MULTI/EXEC
pipeline.
"""

from collections.abc import Callable
from typing import Any

import redis
import redis.asyncio

from cappedlog.core.errors import ConfigurationError

RedisClient = redis.Redis | Callable[[], redis.Redis]
AsyncRedisClient = redis.asyncio.Redis | Callable[[], redis.asyncio.Redis]


class RedisListStore:
    """Redis implementation of CappedListStorePort.

    Args:
        client: A ``redis.Redis`` instance, or a zero-argument callable
            returning one. A callable is resolved on every operation, which
            lets callers hand out connections lazily.
        async_client: A ``redis.asyncio.Redis`` instance, or a callable
            returning one, used by the async methods. Without it only the
            ``_sync`` methods are available.

    Redis errors propagate unchanged; there is no retry.
    """

    def __init__(
        self,
        client: RedisClient | None = None,
        async_client: AsyncRedisClient | None = None,
    ) -> None:
        if client is None and async_client is None:
            raise ConfigurationError("RedisListStore needs a client or an async_client")
        self._client = client
        self._async_client = async_client

    @property
    def client(self) -> redis.Redis:
        """Return the Redis client, calling the factory if one was given."""
        if self._client is None:
            raise ConfigurationError(
                "RedisListStore was built without a client; use the async methods"
            )
        return _resolve(self._client)

    @property
    def async_client(self) -> redis.asyncio.Redis:
        """Return the asyncio Redis client, calling the factory if one was given."""
        if self._async_client is None:
            raise ConfigurationError(
                "RedisListStore was built without an async_client; "
                "use the _sync methods"
            )
        return _resolve(self._async_client)

    async def push_front(self, key: str, value: str, *, limit: int, ttl: int = 0) -> None:
        """Push a value to the front of the list, trim it and refresh its expiry."""
        async with self.async_client.pipeline(transaction=True) as pipe:
            pipe.lpush(key, value)
            pipe.ltrim(key, 0, limit - 1)
            if ttl > 0:
                pipe.expire(key, ttl)
            await pipe.execute()

    async def range(self, key: str, start: int, stop: int) -> list[str]:
        """Return entries start through stop inclusive, newest first."""
        if stop != -1 and stop < start:
            return []
        items = await self.async_client.lrange(key, start, stop)
        return [_as_text(item) for item in items]

    async def exists(self, key: str) -> bool:
        """Return True if the key exists. False once it has expired."""
        return _exists_reply(await self.async_client.exists(key))

    async def delete(self, key: str) -> None:
        """Remove the list."""
        await self.async_client.delete(key)

    def push_front_sync(
        self, key: str, value: str, *, limit: int, ttl: int = 0
    ) -> None:
        """Synchronous push_front."""
        with self.client.pipeline(transaction=True) as pipe:
            pipe.lpush(key, value)
            pipe.ltrim(key, 0, limit - 1)
            if ttl > 0:
                pipe.expire(key, ttl)
            pipe.execute()

    def range_sync(self, key: str, start: int, stop: int) -> list[str]:
        """Synchronous range."""
        if stop != -1 and stop < start:
            return []
        return [_as_text(item) for item in self.client.lrange(key, start, stop)]

    def exists_sync(self, key: str) -> bool:
        """Synchronous exists."""
        return _exists_reply(self.client.exists(key))

    def delete_sync(self, key: str) -> None:
        """Synchronous delete."""
        self.client.delete(key)


def _resolve(client: Any) -> Any:
    if callable(client) and not hasattr(client, "lpush"):
        return client()
    return client


def _exists_reply(reply: Any) -> bool:
    # Older clients reply with a bool, newer ones with the number of keys
    if isinstance(reply, bool):
        return reply
    return int(reply) > 0


def _as_text(item: Any) -> str:
    if isinstance(item, bytes):
        return item.decode("utf-8")
    return item
