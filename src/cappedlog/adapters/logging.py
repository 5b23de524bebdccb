"""Python logging handler adapter for cappedlog.

This adapter bridges Python's standard library logging module to a
CappedLogDevice, so records emitted through ``logging`` land in the
capped list.
"""

import logging
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from cappedlog.core.models import LogRecord
from cappedlog.device import CappedLogDevice

ContextProvider = Callable[[], dict[str, Any]]

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# Default attributes to extract from LogRecord
_DEFAULT_INCLUDE_ATTRS = ["module", "funcName", "lineno", "pathname"]


class CappedLogHandler(logging.Handler):
    """Logging handler that writes log records to a CappedLogDevice.

    Example:
        ```python
        from cappedlog import CappedLogDevice, CappedLogHandler, MemoryListStore

        device = CappedLogDevice(name="app.log", store=MemoryListStore())
        logging.getLogger().addHandler(CappedLogHandler(device))
        ```
    """

    def __init__(
        self,
        device: CappedLogDevice,
        include_attrs: list[str] | None = None,
        level: int = logging.NOTSET,
        context_provider: ContextProvider | None = None,
    ) -> None:
        """Initialize the handler with a device.

        Args:
            device: Device the records are written to.
            include_attrs: LogRecord attributes to copy into the record
                attributes. Defaults to ["module", "funcName", "lineno",
                "pathname"].
            level: Minimum level handled.
            context_provider: Called on every emit; its attributes are
                merged in before extras, so ``extra=`` values win.
        """
        super().__init__(level)
        self._device = device
        self._include_attrs = (
            _DEFAULT_INCLUDE_ATTRS if include_attrs is None else include_attrs
        )
        self._context_provider = context_provider

    @property
    def device(self) -> CappedLogDevice:
        return self._device

    def to_log_record(self, record: logging.LogRecord) -> LogRecord:
        """Convert a stdlib LogRecord into a cappedlog LogRecord."""
        # Map of attribute names to their values from LogRecord
        attr_mapping: dict[str, Any] = {
            "module": record.module,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
            "pathname": record.pathname,
            "thread": record.thread,
            "threadName": record.threadName,
            "processName": record.processName,
        }

        attributes: dict[str, Any] = {
            key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping
        }

        if self._context_provider is not None:
            attributes.update(self._context_provider())

        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_"):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
            if exc_tb is not None:
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return LogRecord(
            timestamp=datetime.fromtimestamp(record.created, tz=UTC),
            severity=record.levelname,
            message=record.getMessage(),
            progname=record.name,
            pid=record.process,
            attributes=attributes,
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the device.

        Errors are reported through ``Handler.handleError`` so a failing
        store never breaks the calling code.
        """
        try:
            self._device.write_sync(self.to_log_record(record))
        except Exception:
            self.handleError(record)
