"""Core domain models for capped log data."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class LogRecord:
    """A structured log record.

    Attributes:
        timestamp: Moment the record was created, or None if unknown.
        severity: Severity label (e.g., INFO, ERROR, DEBUG). Numeric stdlib
            levels are accepted and rendered as labels when stored.
        message: The log message. Usually text, but any value is allowed.
        progname: Name of the program or logger that produced the record.
        pid: Process id of the producer.
        attributes: Additional structured fields, possibly nested.
    """

    timestamp: datetime | None
    severity: str | int
    message: Any
    progname: str | None = None
    pid: int | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


def severity_label(severity: str | int | Enum | None) -> str | None:
    """Return the displayable label for a severity.

    Labels are stored instead of numbers so stored documents stay readable
    and do not depend on how levels are numbered.
    """
    if severity is None:
        return None
    if isinstance(severity, Enum):
        return severity.name
    if isinstance(severity, int):
        return logging.getLevelName(severity)
    return str(severity)
