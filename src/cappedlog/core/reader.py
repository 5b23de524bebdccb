"""Document reader: turns stored documents back into LogRecords."""

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from cappedlog.core.encoding.json_document import decode_document
from cappedlog.core.errors import DecodeError
from cappedlog.core.models import LogRecord

# Older documents kept attributes under "tags"
LEGACY_ATTRIBUTES_KEY = "tags"


class DocumentReader:
    """Reconstruct LogRecords from stored documents.

    Unknown keys are ignored so documents written by newer versions can
    still be read.
    """

    def parse(self, raw: str | bytes) -> LogRecord:
        """Decode and parse one stored document.

        Raises:
            DecodeError: If the document is not a valid JSON object or a
                known field has the wrong type.
        """
        return self.parse_mapping(decode_document(raw))

    def parse_mapping(self, data: Mapping[str, Any]) -> LogRecord:
        """Parse an already decoded document."""
        attributes = data.get("attributes")
        if attributes is None:
            attributes = data.get(LEGACY_ATTRIBUTES_KEY)
        if attributes is None:
            attributes = {}
        elif not isinstance(attributes, Mapping):
            raise DecodeError(
                f"attributes must be an object, got {type(attributes).__name__}"
            )

        return LogRecord(
            timestamp=_parse_timestamp(data.get("timestamp")),
            severity=data.get("severity"),
            message=data.get("message"),
            progname=data.get("progname"),
            pid=data.get("pid"),
            attributes=dict(attributes),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"timestamp must be a number, got {value!r}")
    if not math.isfinite(value):
        raise DecodeError(f"timestamp must be finite, got {value!r}")
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError) as exc:
        raise DecodeError(f"timestamp out of range: {value!r}") from exc
