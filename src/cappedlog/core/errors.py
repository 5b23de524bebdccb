"""Exceptions raised by cappedlog."""


class CappedLogError(Exception):
    """Base class for all cappedlog errors."""


class ConfigurationError(CappedLogError, ValueError):
    """Raised when a device, route or formatter is misconfigured.

    Examples: a key path that runs into a non-mapping value, a document
    formatter that does not return a mapping, a non-positive limit.
    """


class EncodingError(CappedLogError, TypeError):
    """Raised when a document cannot be encoded to JSON."""


class DecodeError(CappedLogError, ValueError):
    """Raised when a stored document cannot be turned back into a record."""
