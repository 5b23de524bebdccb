"""JSON codec for stored documents."""

import json
from typing import Any

from cappedlog.core.coercion import coerce
from cappedlog.core.errors import DecodeError, EncodingError


def encode_document(document: dict[str, Any]) -> str:
    """Encode a document to compact JSON text.

    The document is coerced first, so nested containers of any kind are
    accepted.

    Args:
        document: Document produced by DocumentBuilder.

    Returns:
        JSON text for a single list entry.

    Raises:
        EncodingError: If a value cannot be represented in JSON, including
            NaN and infinite floats.
    """
    try:
        return json.dumps(
            coerce(document),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode log document: {exc}") from exc


def decode_document(raw: str | bytes) -> dict[str, Any]:
    """Decode one stored entry into a dict.

    Raises:
        DecodeError: If raw is not JSON or does not hold a JSON object.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"stored log document is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(
            f"stored log document must be a JSON object, got {type(data).__name__}"
        )
    return data
