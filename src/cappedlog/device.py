"""Capped log device: writes log records to a bounded list and reads them back."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from cappedlog.core.builder import DocumentBuilder, DocumentFormatter
from cappedlog.core.config import (
    DEFAULT_LIMIT,
    DeviceConfig,
    normalize_ttl,
    validate_limit,
    validate_name,
)
from cappedlog.core.encoding.json_document import encode_document
from cappedlog.core.errors import DecodeError
from cappedlog.core.formatting import DateTimeFormatter, ValueFormatter
from cappedlog.core.models import LogRecord
from cappedlog.core.ports import CappedListStorePort
from cappedlog.core.reader import DocumentReader

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class CappedLogDevice:
    """Log device backed by a capped list.

    Each write serializes the record into a JSON document and pushes it to
    the front of the list named ``name``. The list is trimmed to ``limit``
    entries and, when ``ttl`` is set, expires ``ttl`` seconds after the
    last write. This is not a durable log; it exposes recent history.

    Async methods are the primary API. Each has a ``_sync`` twin for
    non-async contexts.

    Example:
        ```python
        from cappedlog import CappedLogDevice, MemoryListStore
        from cappedlog.core.logs import info

        device = CappedLogDevice(name="app.log", store=MemoryListStore(), limit=100)
        device.write_sync(info("started", port=8080))
        device.read_sync(10)
        ```

    Args:
        name: Key of the list in the store.
        store: Store implementing CappedListStorePort.
        limit: Maximum number of entries kept (default 10000).
        ttl: Seconds until the list expires after the last write. None or 0
            disables expiry.
        datetime_format: strftime pattern for instants in documents.
        formatter: Per-type value formatter for message and attributes.
        document_formatter: Callable applied to each assembled document.
        field_routes: Key routes for standard document fields.
    """

    def __init__(
        self,
        name: str,
        store: CappedListStorePort,
        *,
        limit: int = DEFAULT_LIMIT,
        ttl: int | None = None,
        datetime_format: str | None = None,
        formatter: ValueFormatter | None = None,
        document_formatter: DocumentFormatter | None = None,
        field_routes: Mapping[str, Any] | None = None,
    ) -> None:
        self._name = validate_name(name)
        self._store = store
        self._limit = validate_limit(limit)
        self._ttl = normalize_ttl(ttl)
        self._datetime_format = datetime_format
        self._builder = _make_builder(
            datetime_format, formatter, document_formatter, field_routes
        )
        self._reader = DocumentReader()

    @classmethod
    def from_config(
        cls, config: DeviceConfig, store: CappedListStorePort, **kwargs: Any
    ) -> "CappedLogDevice":
        """Create a device from a DeviceConfig and a ready store."""
        return cls(
            name=config.name,
            store=store,
            limit=config.limit,
            ttl=config.ttl,
            datetime_format=config.datetime_format,
            **kwargs,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def store(self) -> CappedListStorePort:
        return self._store

    @property
    def datetime_format(self) -> str | None:
        """strftime pattern used for instants, or None for epoch seconds."""
        return self._datetime_format

    @property
    def builder(self) -> DocumentBuilder:
        return self._builder

    def reconfigure(
        self,
        *,
        datetime_format: str | None = _UNSET,
        formatter: ValueFormatter | None = _UNSET,
        document_formatter: DocumentFormatter | None = _UNSET,
        field_routes: Mapping[str, Any] | None = _UNSET,
    ) -> None:
        """Replace formatting settings.

        A new builder is assembled and swapped in with a single assignment.
        Not safe to call while other threads are writing through this
        device: a concurrent write may use either the old or new settings.
        """
        current = self._builder
        if datetime_format is _UNSET:
            datetime_format = self._datetime_format
        if formatter is _UNSET:
            formatter = current.value_formatter
        if document_formatter is _UNSET:
            document_formatter = current.document_formatter
        if field_routes is _UNSET:
            field_routes = current.routes
        builder = _make_builder(
            datetime_format, formatter, document_formatter, field_routes
        )
        self._datetime_format = datetime_format
        self._builder = builder

    def encode(self, record: LogRecord) -> str:
        """Build and encode the stored document for a record.

        Raises:
            ConfigurationError: If a key route or the document formatter is
                misconfigured.
            EncodingError: If the document cannot be encoded as JSON.
        """
        return encode_document(self._builder.build(record))

    async def write(self, record: LogRecord) -> None:
        """Write a record to the front of the list."""
        payload = self.encode(record)
        await self._store.push_front(
            self._name, payload, limit=self._limit, ttl=self._ttl
        )
        logger.debug("wrote %d bytes to capped log %r", len(payload), self._name)

    async def read(self, count: int | None = None) -> list[LogRecord]:
        """Read up to ``count`` records, newest first.

        ``count`` defaults to the device limit. Entries that cannot be
        decoded are skipped and logged.
        """
        count = self._limit if count is None else count
        if count <= 0:
            return []
        raw_entries = await self._store.range(self._name, 0, count - 1)
        return self._parse_entries(raw_entries)

    async def exists(self) -> bool:
        """Return True if the list exists. False once it has expired."""
        return await self._store.exists(self._name)

    async def last_written_at(self) -> datetime | None:
        """Return the timestamp of the newest record, or None."""
        records = await self.read(1)
        return records[0].timestamp if records else None

    async def clear(self) -> None:
        """Delete the list."""
        await self._store.delete(self._name)

    # --- Sync methods ---

    def write_sync(self, record: LogRecord) -> None:
        """Synchronous write for non-async contexts (logging handlers, WSGI)."""
        payload = self.encode(record)
        self._store.push_front_sync(
            self._name, payload, limit=self._limit, ttl=self._ttl
        )
        logger.debug("wrote %d bytes to capped log %r", len(payload), self._name)

    def read_sync(self, count: int | None = None) -> list[LogRecord]:
        """Synchronous read."""
        count = self._limit if count is None else count
        if count <= 0:
            return []
        raw_entries = self._store.range_sync(self._name, 0, count - 1)
        return self._parse_entries(raw_entries)

    def exists_sync(self) -> bool:
        """Synchronous exists."""
        return self._store.exists_sync(self._name)

    def last_written_at_sync(self) -> datetime | None:
        """Synchronous last_written_at."""
        records = self.read_sync(1)
        return records[0].timestamp if records else None

    def clear_sync(self) -> None:
        """Synchronous clear."""
        self._store.delete_sync(self._name)

    def _parse_entries(self, raw_entries: Iterable[str | bytes]) -> list[LogRecord]:
        records = []
        for position, raw in enumerate(raw_entries):
            try:
                records.append(self._reader.parse(raw))
            except DecodeError as exc:
                logger.warning(
                    "skipping malformed entry %d in capped log %r: %s",
                    position,
                    self._name,
                    exc,
                )
        return records


def _make_builder(
    datetime_format: str | None,
    formatter: ValueFormatter | None,
    document_formatter: DocumentFormatter | None,
    field_routes: Mapping[str, Any] | None,
) -> DocumentBuilder:
    time_formatter = DateTimeFormatter(datetime_format) if datetime_format else None
    return DocumentBuilder(
        time_formatter=time_formatter,
        value_formatter=formatter,
        document_formatter=document_formatter,
        field_routes=field_routes,
    )
