"""Audit log cleanup service for managing retention policies."""

from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging

from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.models.sync_event import SyncEvent

log = logging.getLogger(__name__)


def cleanup_old_access_logs(db: Session, days_to_keep: int = 90) -> int:
    """
    Delete administrator access logs older than ``days_to_keep`` days.

    Sync audit actions (action starts with 'sync') are kept, and SyncEvents
    live in their own append-only table that is never pruned.

    Returns:
        Number of audit log entries deleted
    """
    cutoff_date = datetime.now(timezone.utc) - timedelta(days=days_to_keep)

    deleted = db.query(AuditLog).filter(
        and_(
            AuditLog.created_at < cutoff_date,
            ~AuditLog.action.like('sync%')
        )
    ).delete(synchronize_session=False)

    db.commit()

    log.info(f"Audit cleanup: Deleted {deleted} access log entries older than {days_to_keep} days (cutoff: {cutoff_date.isoformat()})")

    return deleted


def get_audit_log_stats(db: Session) -> dict:
    """Counts of access logs, sync audit logs and sync events, with the oldest entries."""
    access_logs = db.query(AuditLog).filter(~AuditLog.action.like('sync%'))
    sync_logs = db.query(AuditLog).filter(AuditLog.action.like('sync%'))

    oldest_access = access_logs.order_by(AuditLog.created_at.asc()).first()
    oldest_event = db.query(SyncEvent).order_by(SyncEvent.created_at.asc()).first()

    return {
        "total_logs": db.query(AuditLog).count(),
        "access_logs": access_logs.count(),
        "sync_logs": sync_logs.count(),
        "sync_events": db.query(SyncEvent).count(),
        "oldest_access_log": oldest_access.created_at.isoformat() if oldest_access else None,
        "oldest_sync_event": oldest_event.created_at.isoformat() if oldest_event else None,
    }
