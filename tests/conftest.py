"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from cappedlog.adapters.storage.in_memory import MemoryListStore
from cappedlog.core.models import LogRecord
from cappedlog.device import CappedLogDevice
from tests.helpers import FakeClock


@pytest.fixture
def list_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for SQLite list store tests."""
    return str(tmp_path / "lists.db")


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at t=1000 that only moves when told to."""
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryListStore:
    """Empty in-memory list store driven by the fake clock."""
    return MemoryListStore(clock=clock)


@pytest.fixture
def device(memory_store: MemoryListStore) -> CappedLogDevice:
    """Device named app.log on an in-memory store."""
    return CappedLogDevice(name="app.log", store=memory_store)


@pytest.fixture
def make_record() -> Callable[..., LogRecord]:
    """Factory for records with a fixed timestamp and attributes.

    Usage:
        def test_something(make_record):
            record = make_record("message 1")
    """

    def _make(
        message: object = "message",
        severity: str = "INFO",
        timestamp: datetime | None = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=UTC),
        **attributes: object,
    ) -> LogRecord:
        return LogRecord(
            timestamp=timestamp,
            severity=severity,
            message=message,
            progname="test",
            pid=12345,
            attributes=attributes or {"foo": "bar", "baz": "boo"},
        )

    return _make
