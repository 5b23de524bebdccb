"""Document builder: turns a LogRecord into a JSON-ready dict."""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from cappedlog.core.errors import ConfigurationError
from cappedlog.core.formatting import ValueFormatter
from cappedlog.core.models import LogRecord, severity_label
from cappedlog.core.routes import KeyRoute, SingleKey, as_route, set_attribute

# Document fields in the order they are written; later fields win on collisions
STANDARD_FIELDS = (
    "timestamp",
    "time",
    "severity",
    "progname",
    "pid",
    "message",
    "attributes",
)

DocumentFormatter = Callable[[dict[str, Any]], Mapping[str, Any]]
TimeFormatter = Callable[[datetime], str]


class DocumentBuilder:
    """Build stored documents from log records.

    The builder holds only configuration and can be shared between
    threads. Every call to build() returns a fresh dict.

    Args:
        time_formatter: Renders instants as text. When absent, the ``time``
            field falls back to float seconds since the epoch.
        value_formatter: Per-type formatter for the message and attributes.
            Defaults to ValueFormatter.default().
        document_formatter: Called with the assembled document; its return
            value, which must be a mapping, becomes the stored document.
        field_routes: Maps standard field names to key routes, e.g.
            ``{"time": ("meta", "time")}``. Fields not listed are stored
            under their own name.
    """

    def __init__(
        self,
        time_formatter: TimeFormatter | None = None,
        value_formatter: ValueFormatter | None = None,
        document_formatter: DocumentFormatter | None = None,
        field_routes: Mapping[str, Any] | None = None,
    ) -> None:
        self._time_formatter = time_formatter
        # Private copy; later add/remove calls on the caller's registry do not leak in
        self._value_formatter = (
            value_formatter.copy()
            if value_formatter is not None
            else ValueFormatter.default()
        )
        # Nested instants get the same rendering as top-level ones
        self._attribute_formatter = self._value_formatter
        if time_formatter is not None:
            self._attribute_formatter = self._value_formatter.copy().add(
                datetime, time_formatter
            )
        self._document_formatter = document_formatter
        self._routes = _build_routes(field_routes or {})

    @property
    def time_formatter(self) -> TimeFormatter | None:
        return self._time_formatter

    @property
    def value_formatter(self) -> ValueFormatter:
        """Return a copy of the value formatter registry."""
        return self._value_formatter.copy()

    @property
    def document_formatter(self) -> DocumentFormatter | None:
        return self._document_formatter

    @property
    def routes(self) -> dict[str, KeyRoute]:
        return dict(self._routes)

    def build(self, record: LogRecord) -> dict[str, Any]:
        """Build the document for a record.

        Raises:
            ConfigurationError: If a field route collides with an existing
                non-mapping value or the document formatter does not return
                a mapping.
        """
        data: dict[str, Any] = {}
        routes = self._routes
        timestamp = record.timestamp

        if timestamp is not None:
            set_attribute(data, routes["timestamp"], timestamp.timestamp())
            time_value: Any = (
                timestamp if self._time_formatter is not None else timestamp.timestamp()
            )
            set_attribute(data, routes["time"], time_value, self._time_formatter)

        set_attribute(data, routes["severity"], severity_label(record.severity))
        set_attribute(data, routes["progname"], record.progname)
        set_attribute(data, routes["pid"], record.pid)
        set_attribute(
            data,
            routes["message"],
            self._attribute_formatter.format(record.message),
            self._time_formatter,
        )
        if record.attributes is not None:
            set_attribute(
                data,
                routes["attributes"],
                self._attribute_formatter.format(record.attributes),
            )

        if self._document_formatter is None:
            return data
        formatted = self._document_formatter(data)
        if not isinstance(formatted, Mapping):
            raise ConfigurationError(
                "document formatter must return a mapping, "
                f"got {type(formatted).__name__}"
            )
        return dict(formatted)


def _build_routes(field_routes: Mapping[str, Any]) -> dict[str, KeyRoute]:
    unknown = set(field_routes) - set(STANDARD_FIELDS)
    if unknown:
        raise ConfigurationError(
            f"unknown document fields in routes: {', '.join(sorted(unknown))}"
        )
    routes: dict[str, KeyRoute] = {name: SingleKey(name) for name in STANDARD_FIELDS}
    for name, target in field_routes.items():
        routes[name] = as_route(target)
    return routes
