"""Registry of store factories, keyed by name.

Lets a device be assembled from plain configuration::

    device = create_device(DeviceConfig.from_mapping({
        "name": "app.log",
        "store": "sqlite",
        "storeOptions": {"db_path": "/var/tmp/app-logs.db"},
    }))
"""

from collections.abc import Callable
from typing import Any

import redis
import redis.asyncio

from cappedlog.adapters.storage.in_memory import MemoryListStore
from cappedlog.adapters.storage.redis import RedisListStore
from cappedlog.adapters.storage.sqlite import SQLiteListStore
from cappedlog.core.config import DeviceConfig
from cappedlog.core.errors import ConfigurationError
from cappedlog.core.ports import CappedListStorePort
from cappedlog.device import CappedLogDevice

StoreFactory = Callable[..., CappedListStorePort]


class StoreRegistry:
    """Maps store names to factories that build CappedListStorePort objects."""

    def __init__(self) -> None:
        self._factories: dict[str, StoreFactory] = {}

    def register(self, name: str, factory: StoreFactory) -> None:
        """Register a factory under a name.

        Raises:
            TypeError: If factory is not callable.
            ValueError: If the name is already registered.
        """
        if not callable(factory):
            raise TypeError("factory must be callable")
        if name in self._factories:
            raise ValueError(f"store {name!r} is already registered")
        self._factories[name] = factory

    def lookup(self, name: str) -> StoreFactory | None:
        """Return the factory registered under name, or None."""
        return self._factories.get(name)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, name: str, **options: Any) -> CappedListStorePort:
        """Build a store by name.

        Raises:
            KeyError: If no factory is registered under name.
            ConfigurationError: If the factory rejects the options.
        """
        factory = self.lookup(name)
        if factory is None:
            raise KeyError(f"unknown store {name!r}; registered: {self.names()}")
        try:
            return factory(**options)
        except TypeError as exc:
            raise ConfigurationError(f"invalid options for store {name!r}: {exc}") from exc


def default_registry() -> StoreRegistry:
    """Return a registry with the bundled stores: memory, sqlite and redis."""
    registry = StoreRegistry()
    registry.register("memory", MemoryListStore)
    registry.register("sqlite", SQLiteListStore)
    registry.register("redis", _redis_store)
    return registry


def create_device(
    config: DeviceConfig,
    registry: StoreRegistry | None = None,
    **device_kwargs: Any,
) -> CappedLogDevice:
    """Build the configured store and return a device writing to it.

    Args:
        config: Device settings, including the store name and options.
        registry: Store registry; defaults to default_registry().
        **device_kwargs: Extra CappedLogDevice arguments such as
            ``formatter`` or ``document_formatter``.
    """
    registry = registry if registry is not None else default_registry()
    store = registry.create(config.store, **config.store_options)
    return CappedLogDevice.from_config(config, store, **device_kwargs)


def _redis_store(
    client: Any = None,
    async_client: Any = None,
    url: str | None = None,
    **client_options: Any,
) -> RedisListStore:
    """Build a RedisListStore from clients, a URL or client options.

    A URL or client options produce both a blocking and an asyncio client
    with the same settings.
    """
    if client is not None or async_client is not None:
        return RedisListStore(client, async_client)
    if url is not None:
        return RedisListStore(
            redis.Redis.from_url(url, **client_options),
            redis.asyncio.Redis.from_url(url, **client_options),
        )
    return RedisListStore(
        redis.Redis(**client_options), redis.asyncio.Redis(**client_options)
    )
