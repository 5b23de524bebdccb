"""Structural coercion of arbitrary values into JSON-safe form.

This is the last pass before a document is handed to the JSON encoder.
Domain objects are expected to have been rendered already by the value
formatter; the coercer only guarantees that containers are plain dicts
and lists all the way down, and gives objects a chance to render
themselves through a ``to_json_safe()`` method.
"""

import inspect
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

# Substituted for a container that contains itself
RECURSIVE_REFERENCE = "<recursive reference>"

_TEXT_TYPES = (str, bytes, bytearray, memoryview)

_REQUIRED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


@runtime_checkable
class JsonSafe(Protocol):
    """Objects that know how to render themselves as JSON-safe values.

    The result of ``to_json_safe()`` is trusted as-is and is not walked
    any further.
    """

    def to_json_safe(self) -> Any: ...


def is_collection(value: Any) -> bool:
    """Return True for non-text iterables (lists, tuples, sets, generators)."""
    return isinstance(value, Iterable) and not isinstance(value, _TEXT_TYPES)


def ordered_items(value: Iterable[Any]) -> list[Any]:
    """Return the items of a collection as a list.

    Sets and frozensets are sorted when their items allow it, so the
    same set always produces the same list.
    """
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    return list(value)


def json_safe_hook(value: Any) -> Any:
    """Return the bound ``to_json_safe`` method if it takes no required arguments."""
    if not isinstance(value, JsonSafe):
        return None
    method = value.to_json_safe
    if not callable(method):
        return None
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return None
    for parameter in signature.parameters.values():
        if parameter.kind in _REQUIRED_KINDS and parameter.default is parameter.empty:
            return None
    return method


def coerce(value: Any, _active: set[int] | None = None) -> Any:
    """Convert a value graph into a form the JSON encoder accepts.

    Resolution order, first match wins:

    1. None stays None.
    2. Objects with a zero-argument ``to_json_safe()`` return its result.
    3. Mappings become dicts with the same keys and coerced values.
    4. Other non-text collections become lists of coerced items.
    5. Everything else is returned unchanged.

    Never raises on its own; values the encoder cannot handle are left
    for the encoder to reject.

    Args:
        value: Any value.

    Returns:
        The coerced value.
    """
    if value is None:
        return None

    hook = json_safe_hook(value)
    if hook is not None:
        return hook()

    is_mapping = isinstance(value, Mapping)
    if not is_mapping and not is_collection(value):
        return value

    active = _active if _active is not None else set()
    marker = id(value)
    if marker in active:
        return RECURSIVE_REFERENCE
    active.add(marker)
    try:
        if is_mapping:
            return {key: coerce(item, active) for key, item in value.items()}
        return [coerce(item, active) for item in ordered_items(value)]
    finally:
        active.discard(marker)
