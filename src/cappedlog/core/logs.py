"""Log helper functions for creating LogRecord objects."""

import os
from datetime import UTC, datetime
from typing import Any

from cappedlog.core.models import LogRecord


def log(
    severity: str,
    message: Any,
    progname: str | None = None,
    **attributes: Any,
) -> LogRecord:
    """Create a log record stamped with the current time and process id.

    Args:
        severity: Severity label (e.g., "INFO", "ERROR", "DEBUG")
        message: The log message
        progname: Optional program name
        **attributes: Additional structured fields

    Returns:
        LogRecord with current timestamp
    """
    return LogRecord(
        timestamp=datetime.now(UTC),
        severity=severity,
        message=message,
        progname=progname,
        pid=os.getpid(),
        attributes=dict(attributes),
    )


def info(message: Any, **attributes: Any) -> LogRecord:
    """Create an INFO log record with automatic timestamp."""
    return log("INFO", message, **attributes)


def error(message: Any, **attributes: Any) -> LogRecord:
    """Create an ERROR log record with automatic timestamp."""
    return log("ERROR", message, **attributes)


def debug(message: Any, **attributes: Any) -> LogRecord:
    """Create a DEBUG log record with automatic timestamp."""
    return log("DEBUG", message, **attributes)


def warn(message: Any, **attributes: Any) -> LogRecord:
    """Create a WARN log record with automatic timestamp."""
    return log("WARN", message, **attributes)
