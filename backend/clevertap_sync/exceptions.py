"""Error taxonomy of the synchronization engine."""

from typing import Any, Dict, Optional


class SyncError(Exception):
    """Base class for all synchronization errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigError(SyncError):
    """Static misconfiguration (unknown region, missing connection). Never retried."""


class BuildError(SyncError):
    """Payload could not be built for a record; no network call is made.

    ``partial_body`` holds whatever part of the payload was assembled before the
    failure so the event log can show it.
    """

    def __init__(self, message: str, partial_body: Optional[Dict[str, Any]] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.partial_body = partial_body or {}


class CoercionError(BuildError):
    """A raw field value does not fit its declared data type."""

    def __init__(self, message: str, value: Any = None, data_type: Optional[str] = None):
        super().__init__(message, details={"value": repr(value), "data_type": data_type})
        self.value = value
        self.data_type = data_type


class TransportError(SyncError):
    """The HTTP call could not complete (network failure, timeout)."""
