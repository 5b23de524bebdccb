"""Key routes: where a value lands inside a document.

A route is one of three explicit variants:

- ``SingleKey("severity")`` stores the value under one key.
- ``PathKeys(("meta", "time"))`` stores it at a nested location, creating
  intermediate dicts as needed and merging with dicts already there.
- ``TransformFn(fn)`` calls ``fn(value)`` and merges the returned mapping
  into the current level, which fans one value out into several fields.
"""

from collections.abc import Callable, Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from cappedlog.core.errors import ConfigurationError
from cappedlog.core.formatting import is_instant


@dataclass(frozen=True)
class SingleKey:
    """Store the value directly under ``key``."""

    key: str


@dataclass(frozen=True)
class PathKeys:
    """Store the value at the nested location described by ``keys``.

    An empty path drops the value.
    """

    keys: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))


@dataclass(frozen=True)
class TransformFn:
    """Merge the mapping returned by ``fn(value)`` into the current level."""

    fn: Callable[[Any], Any]


KeyRoute = SingleKey | PathKeys | TransformFn


def as_route(target: KeyRoute | str | Sequence[str] | Callable[[Any], Any]) -> KeyRoute:
    """Turn a plain key, key sequence or callable into a route.

    Meant to be called once when a builder is configured, not per value.

    Raises:
        ConfigurationError: If target is none of the supported shapes.
    """
    if isinstance(target, (SingleKey, PathKeys, TransformFn)):
        return target
    if isinstance(target, str):
        return SingleKey(target)
    if isinstance(target, Sequence):
        if not all(isinstance(key, str) for key in target):
            raise ConfigurationError(f"key path must contain only strings: {target!r}")
        return PathKeys(tuple(target))
    if callable(target):
        return TransformFn(target)
    raise ConfigurationError(f"unsupported key route: {target!r}")


def set_attribute(
    data: MutableMapping[str, Any],
    route: KeyRoute,
    value: Any,
    time_formatter: Callable[[Any], str] | None = None,
) -> None:
    """Place a value into ``data`` according to a route.

    None values are skipped so absent fields never show up as nulls.
    Instants are passed through ``time_formatter`` first when one is given.

    Raises:
        ConfigurationError: If a path runs into a value that is not a mapping.
    """
    if value is None:
        return
    if time_formatter is not None and is_instant(value):
        value = time_formatter(value)

    if isinstance(route, SingleKey):
        data[route.key] = value
    elif isinstance(route, PathKeys):
        _set_path(data, route.keys, value)
    elif isinstance(route, TransformFn):
        fanned_out = route.fn(value)
        if isinstance(fanned_out, Mapping):
            data.update({str(key): item for key, item in fanned_out.items()})
    else:
        raise ConfigurationError(f"unsupported key route: {route!r}")


def _set_path(data: MutableMapping[str, Any], keys: tuple[str, ...], value: Any) -> None:
    if not keys:
        return
    target = data
    for depth, key in enumerate(keys[:-1]):
        node = target.get(key)
        if node is None:
            node = {}
            target[key] = node
        elif not isinstance(node, MutableMapping):
            path = ".".join(keys[: depth + 1])
            raise ConfigurationError(
                f"cannot route value to {'.'.join(keys)!r}: {path!r} already holds "
                f"a {type(node).__name__}"
            )
        target = node
    target[keys[-1]] = value
