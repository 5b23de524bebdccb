"""Storage adapters implementing the capped list port."""

from cappedlog.adapters.storage.in_memory import MemoryListStore
from cappedlog.adapters.storage.redis import RedisListStore
from cappedlog.adapters.storage.sqlite import SQLiteListStore

__all__ = [
    "MemoryListStore",
    "RedisListStore",
    "SQLiteListStore",
]
