"""Step definitions for capped_list.feature."""

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from cappedlog.adapters.storage.in_memory import MemoryListStore
from cappedlog.core.models import LogRecord
from cappedlog.device import CappedLogDevice
from tests.helpers import FakeClock

_QUOTED = re.compile(r'"([^"]*)"')


@dataclass
class CappedListContext:
    """State shared by the steps of one scenario."""

    clock: FakeClock = field(default_factory=FakeClock)
    name: str = "app.log"
    limit: int = 10
    ttl: int = 0
    routes: dict[str, list[str]] = field(default_factory=dict)
    store: MemoryListStore = field(init=False)
    _device: CappedLogDevice | None = None

    def __post_init__(self) -> None:
        self.store = MemoryListStore(clock=self.clock)

    @property
    def device(self) -> CappedLogDevice:
        """Device built from the settings given so far."""
        if self._device is None:
            self._device = CappedLogDevice(
                name=self.name,
                store=self.store,
                limit=self.limit,
                ttl=self.ttl,
                field_routes=self.routes,
            )
        return self._device

    def raw_entries(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.store.range_sync(self.name, 0, -1)]


def _record(message: Any) -> LogRecord:
    return LogRecord(
        timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=UTC),
        severity="INFO",
        message=message,
        progname="test",
        pid=12345,
    )


@pytest.fixture
def ctx() -> CappedListContext:
    """Fresh scenario context for each test."""
    return CappedListContext()


# === Given ===


@given(parsers.parse('a capped log device named "{name}" with limit {limit:d}'))
def given_device(ctx: CappedListContext, name: str, limit: int) -> None:
    ctx.name = name
    ctx.limit = limit


@given(parsers.parse("the device keeps records for {seconds:d} second"))
def given_ttl(ctx: CappedListContext, seconds: int) -> None:
    ctx.ttl = seconds


@given(parsers.parse('the "{name}" field is routed to "{path}"'))
def given_route(ctx: CappedListContext, name: str, path: str) -> None:
    ctx.routes[name] = path.split(".")


# === When ===


@when(parsers.parse("the records {messages} are written"))
def when_records_written(ctx: CappedListContext, messages: str) -> None:
    for message in _QUOTED.findall(messages):
        ctx.device.write_sync(_record(message))


@when("a record without a message is written")
def when_record_without_message(ctx: CappedListContext) -> None:
    ctx.device.write_sync(_record(None))


@when(parsers.parse("{seconds:d} seconds pass"))
def when_time_passes(ctx: CappedListContext, seconds: int) -> None:
    ctx.clock.advance(seconds)


# === Then ===


@then(parsers.parse("reading {count:d} records returns {messages}"))
def then_reading_returns(ctx: CappedListContext, count: int, messages: str) -> None:
    expected = _QUOTED.findall(messages)
    assert [r.message for r in ctx.device.read_sync(count)] == expected


@then("the log does not exist")
def then_log_does_not_exist(ctx: CappedListContext) -> None:
    assert ctx.device.exists_sync() is False


@then(parsers.parse('the stored entry has no "{key}" key'))
def then_entry_lacks_key(ctx: CappedListContext, key: str) -> None:
    (entry,) = ctx.raw_entries()
    assert key not in entry


@then(parsers.parse('the stored entry has "{path}" equal to "{value}"'))
def then_entry_has_value(ctx: CappedListContext, path: str, value: str) -> None:
    (entry,) = ctx.raw_entries()
    for key in path.split("."):
        entry = entry[key]
    assert entry == value
