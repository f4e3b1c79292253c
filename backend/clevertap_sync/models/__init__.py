"""Database models."""

from clevertap_sync.models.connection import Connection
from clevertap_sync.models.sync_configuration import SyncConfiguration, FieldMapping
from clevertap_sync.models.sync_event import SyncEvent
from clevertap_sync.models.audit_log import AuditLog

__all__ = [
    "Connection",
    "SyncConfiguration",
    "FieldMapping",
    "SyncEvent",
    "AuditLog",
]
