"""Tests for time and value formatters."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import PurePosixPath
from typing import Any

import pytest

from cappedlog.core.coercion import RECURSIVE_REFERENCE
from cappedlog.core.formatting import DateTimeFormatter, ValueFormatter, is_instant

pytestmark = [
    pytest.mark.core,
    pytest.mark.tier(0),
]


class Color(Enum):
    RED = "red"


class Money:
    def __init__(self, cents: int) -> None:
        self.cents = cents


class TestDateTimeFormatter:
    """Tests for DateTimeFormatter."""

    @pytest.mark.tra("Core.Formatting.DateTime")
    def test_formats_with_pattern(self) -> None:
        """The strftime pattern is applied."""
        formatter = DateTimeFormatter("%Y-%m-%dT%H:%M:%S")
        moment = datetime(2024, 5, 1, 12, 30, 15, tzinfo=UTC)
        assert formatter(moment) == "2024-05-01T12:30:15"

    @pytest.mark.tra("Core.Formatting.DateTime")
    def test_exposes_pattern(self) -> None:
        """The configured pattern can be read back."""
        assert DateTimeFormatter("%H:%M").pattern == "%H:%M"

    @pytest.mark.tra("Core.Formatting.Instant")
    def test_only_datetimes_are_instants(self) -> None:
        """Dates and numbers are not instants."""
        assert is_instant(datetime.now(UTC))
        assert not is_instant(date(2024, 1, 1))
        assert not is_instant(1702300000.0)


class TestValueFormatter:
    """Tests for the per-type value formatter."""

    @pytest.mark.tra("Core.Formatting.Value.Default")
    def test_default_renders_common_types(self) -> None:
        """The default registry renders non-JSON standard types."""
        formatter = ValueFormatter.default()
        ident = uuid.UUID("12345678-1234-5678-1234-567812345678")

        assert formatter.format(ValueError("boom")) == "ValueError('boom')"
        assert formatter.format(date(2024, 1, 2)) == "2024-01-02"
        assert formatter.format(Color.RED) == "red"
        assert formatter.format(Decimal("1.5")) == 1.5
        assert formatter.format(ident) == str(ident)
        assert formatter.format(PurePosixPath("/tmp/x")) == "/tmp/x"

    @pytest.mark.tra("Core.Formatting.Value.Decimal")
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("sNaN", "sNaN"),
            ("NaN", "NaN"),
            ("Infinity", "Infinity"),
            ("-Infinity", "-Infinity"),
        ],
    )
    def test_non_finite_decimals_render_as_text(
        self, value: str, expected: str
    ) -> None:
        """Decimals without a JSON number form are stored as text."""
        assert ValueFormatter.default().format(Decimal(value)) == expected

    @pytest.mark.tra("Core.Formatting.Value.Default")
    def test_default_renders_datetime_as_isoformat(self) -> None:
        """Instants default to ISO 8601 text."""
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert ValueFormatter.default().format(moment) == "2024-01-02T03:04:05+00:00"

    @pytest.mark.tra("Core.Formatting.Value.Mro")
    def test_lookup_follows_mro(self) -> None:
        """A formatter for a base class handles subclasses."""
        formatter = ValueFormatter().add(LookupError, lambda exc: "lookup")
        assert formatter.format(KeyError("k")) == "lookup"

    @pytest.mark.tra("Core.Formatting.Value.Mro")
    def test_most_specific_formatter_wins(self) -> None:
        """A subclass registration takes precedence over its base."""
        formatter = (
            ValueFormatter()
            .add(Exception, lambda exc: "exception")
            .add(KeyError, lambda exc: "key error")
        )
        assert formatter.format(KeyError("k")) == "key error"
        assert formatter.format(ValueError("v")) == "exception"

    @pytest.mark.tra("Core.Formatting.Value.Structured")
    def test_containers_are_walked(self) -> None:
        """Items inside mappings and collections are formatted."""
        formatter = ValueFormatter().add(Money, lambda m: f"${m.cents / 100:.2f}")
        value = {"total": Money(1250), "items": (Money(50), 3)}
        assert formatter.format(value) == {"total": "$12.50", "items": ["$0.50", 3]}

    @pytest.mark.tra("Core.Formatting.Value.Object")
    def test_object_formatter_is_fallback_for_non_containers(self) -> None:
        """A formatter for object only handles opaque values."""
        formatter = ValueFormatter().add(object, lambda value: "opaque")
        assert formatter.format({"a": [Money(1), "text", 2]}) == {
            "a": ["opaque", "text", 2]
        }

    @pytest.mark.tra("Core.Formatting.Value.Unregistered")
    def test_unregistered_values_pass_through(self) -> None:
        """Values without a formatter are returned unchanged."""
        money = Money(1)
        assert ValueFormatter().format(money) is money

    @pytest.mark.tra("Core.Formatting.Value.Registry")
    def test_remove_and_clear(self) -> None:
        """Registrations can be removed individually or all at once."""
        formatter = ValueFormatter.default()
        formatter.remove(Exception)
        error = ValueError("x")
        assert formatter.format(error) is error

        formatter.clear()
        assert formatter.format(Color.RED) is Color.RED

    @pytest.mark.tra("Core.Formatting.Value.Registry")
    def test_copy_is_independent(self) -> None:
        """Changing a copy leaves the original alone."""
        original = ValueFormatter()
        copy = original.copy().add(Money, lambda m: m.cents)
        money = Money(5)
        assert copy.format(money) == 5
        assert original.format(money) is money

    @pytest.mark.tra("Core.Formatting.Value.Registry")
    def test_non_callable_formatter_raises(self) -> None:
        """Only callables can be registered."""
        with pytest.raises(TypeError, match="formatter must be callable"):
            ValueFormatter().add(Money, "not callable")  # type: ignore[arg-type]

    @pytest.mark.tra("Core.Formatting.Value.Cycle")
    def test_cyclic_attributes_terminate(self) -> None:
        """Self-references are cut while walking."""
        value: dict[str, Any] = {"a": 1}
        value["self"] = value
        assert ValueFormatter().format(value) == {"a": 1, "self": RECURSIVE_REFERENCE}
