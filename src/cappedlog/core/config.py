"""Device configuration."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cappedlog.core.errors import ConfigurationError

DEFAULT_LIMIT = 10_000

# camelCase spellings accepted by from_mapping
_ALIASES = {
    "datetimeFormat": "datetime_format",
    "storeOptions": "store_options",
}


@dataclass(frozen=True)
class DeviceConfig:
    """Settings for a capped log device.

    Attributes:
        name: Key of the list in the store.
        limit: Maximum number of entries kept.
        ttl: Seconds until the whole list expires. None or 0 disables expiry.
        datetime_format: strftime pattern used to render instants.
        store: Name of the store in the store registry.
        store_options: Keyword arguments for the store factory.
    """

    name: str
    limit: int = DEFAULT_LIMIT
    ttl: int | None = None
    datetime_format: str | None = None
    store: str = "memory"
    store_options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_name(self.name)
        validate_limit(self.limit)
        object.__setattr__(self, "ttl", normalize_ttl(self.ttl))
        if self.datetime_format is not None and not isinstance(
            self.datetime_format, str
        ):
            raise ConfigurationError("datetime_format must be a string")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "DeviceConfig":
        """Build a config from a plain mapping, e.g. parsed YAML or JSON.

        Both snake_case and camelCase option names are accepted.

        Raises:
            ConfigurationError: On unknown options or invalid values.
        """
        known = {
            "name",
            "limit",
            "ttl",
            "datetime_format",
            "store",
            "store_options",
        }
        values: dict[str, Any] = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"unknown device option: {key!r}")
            values[name] = value
        if "name" not in values:
            raise ConfigurationError("device option 'name' is required")
        if values.get("store_options") is None:
            values.pop("store_options", None)
        elif not isinstance(values["store_options"], Mapping):
            raise ConfigurationError("store_options must be a mapping")
        else:
            values["store_options"] = dict(values["store_options"])
        return cls(**values)


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise ConfigurationError("name must be a non-empty string")
    return name


def validate_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ConfigurationError(f"limit must be a positive integer, got {limit!r}")
    return limit


def normalize_ttl(ttl: Any) -> int:
    """Return ttl as whole seconds, 0 meaning no expiry."""
    if ttl is None:
        return 0
    if isinstance(ttl, bool):
        raise ConfigurationError(f"ttl must be a number of seconds, got {ttl!r}")
    try:
        seconds = int(ttl)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"ttl must be a number of seconds, got {ttl!r}"
        ) from exc
    if seconds < 0:
        raise ConfigurationError(f"ttl must not be negative, got {ttl!r}")
    return seconds
