"""cappedlog: a capped-size log sink.

Log records are serialized into compact JSON documents and pushed onto a
list that is trimmed to a fixed length and may expire after a time to live.
"""

from cappedlog.adapters.logging import CappedLogHandler, ContextProvider
from cappedlog.adapters.registry import StoreRegistry, create_device, default_registry
from cappedlog.adapters.storage import MemoryListStore, RedisListStore, SQLiteListStore
from cappedlog.core.builder import DocumentBuilder
from cappedlog.core.coercion import JsonSafe, coerce
from cappedlog.core.config import DeviceConfig
from cappedlog.core.encoding.json_document import decode_document, encode_document
from cappedlog.core.errors import (
    CappedLogError,
    ConfigurationError,
    DecodeError,
    EncodingError,
)
from cappedlog.core.formatting import DateTimeFormatter, ValueFormatter
from cappedlog.core.models import LogRecord
from cappedlog.core.ports import CappedListStorePort
from cappedlog.core.reader import DocumentReader
from cappedlog.core.routes import PathKeys, SingleKey, TransformFn, set_attribute
from cappedlog.device import CappedLogDevice

__all__ = [
    "CappedListStorePort",
    "CappedLogDevice",
    "CappedLogError",
    "CappedLogHandler",
    "ConfigurationError",
    "ContextProvider",
    "DateTimeFormatter",
    "DecodeError",
    "DeviceConfig",
    "DocumentBuilder",
    "DocumentReader",
    "EncodingError",
    "JsonSafe",
    "LogRecord",
    "MemoryListStore",
    "PathKeys",
    "RedisListStore",
    "SQLiteListStore",
    "SingleKey",
    "StoreRegistry",
    "TransformFn",
    "ValueFormatter",
    "coerce",
    "create_device",
    "decode_document",
    "default_registry",
    "encode_document",
    "set_attribute",
]
