"""CleverTap record synchronization service."""

from clevertap_sync.logging_config import configure_logging  # noqa: F401  (registers the TRACE level)

__version__ = "1.0.0"
