"""Formatters applied to values before they are stored in a document."""

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any

from cappedlog.core.coercion import (
    RECURSIVE_REFERENCE,
    is_collection,
    json_safe_hook,
    ordered_items,
)

FormatFunc = Callable[[Any], Any]

_JSON_SCALARS = (str, int, float, bool)


def is_instant(value: Any) -> bool:
    """Return True if value is a point in time."""
    return isinstance(value, datetime)


@dataclass(frozen=True)
class DateTimeFormatter:
    """Format instants as text with a strftime pattern.

    Args:
        pattern: strftime pattern, e.g. "%Y-%m-%dT%H:%M:%S.%f".
    """

    pattern: str

    def __call__(self, value: datetime) -> str:
        return value.strftime(self.pattern)


class ValueFormatter:
    """Per-type formatter registry.

    Formatters are looked up along the MRO of the value's type, so a
    formatter registered for ``Exception`` handles every exception
    subclass. Mappings and collections without a dedicated formatter are
    walked and their items formatted individually. A formatter registered
    for ``object`` is only used for values that are not containers.

    Example:
        ```python
        formatter = ValueFormatter.default()
        formatter.add(Money, lambda m: f"{m.amount} {m.currency}")
        ```
    """

    def __init__(self, formatters: Mapping[type, FormatFunc] | None = None) -> None:
        self._formatters: dict[type, FormatFunc] = dict(formatters or {})

    @classmethod
    def default(cls) -> "ValueFormatter":
        """Return a formatter with renderings for common non-JSON types."""
        return cls(
            {
                Exception: repr,
                datetime: _isoformat,
                date: _isoformat,
                time: _isoformat,
                Enum: _enum_value,
                Decimal: _decimal_value,
                uuid.UUID: str,
                PurePath: str,
            }
        )

    def add(self, value_type: type, formatter: FormatFunc) -> "ValueFormatter":
        """Register a formatter for a type. Returns self for chaining."""
        if not callable(formatter):
            raise TypeError("formatter must be callable")
        self._formatters[value_type] = formatter
        return self

    def remove(self, value_type: type) -> "ValueFormatter":
        """Unregister the formatter for a type, if any. Returns self."""
        self._formatters.pop(value_type, None)
        return self

    def clear(self) -> "ValueFormatter":
        """Remove all formatters. Returns self."""
        self._formatters.clear()
        return self

    def copy(self) -> "ValueFormatter":
        """Return an independent copy of this registry."""
        return ValueFormatter(self._formatters)

    def formatter_for(self, value_type: type) -> FormatFunc | None:
        """Return the most specific formatter for a type, ignoring ``object``."""
        for klass in value_type.__mro__:
            if klass is object:
                break
            formatter = self._formatters.get(klass)
            if formatter is not None:
                return formatter
        return None

    def format(self, value: Any) -> Any:
        """Format a value, walking into mappings and collections."""
        return self._format(value, set())

    def _format(self, value: Any, active: set[int]) -> Any:
        if value is None:
            return None
        formatter = self.formatter_for(type(value))
        if formatter is not None:
            return formatter(value)
        if json_safe_hook(value) is not None:
            return value

        is_mapping = isinstance(value, Mapping)
        if is_mapping or is_collection(value):
            marker = id(value)
            if marker in active:
                return RECURSIVE_REFERENCE
            active.add(marker)
            try:
                if is_mapping:
                    return {
                        key: self._format(item, active) for key, item in value.items()
                    }
                return [self._format(item, active) for item in ordered_items(value)]
            finally:
                active.discard(marker)

        fallback = self._formatters.get(object)
        if fallback is not None and not isinstance(value, _JSON_SCALARS):
            return fallback(value)
        return value


def _isoformat(value: date | time) -> str:
    return value.isoformat()


def _enum_value(value: Enum) -> Any:
    return value.value


def _decimal_value(value: Decimal) -> float | str:
    # NaN and infinities have no JSON number form
    if value.is_finite():
        return float(value)
    return str(value)
