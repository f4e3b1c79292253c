"""APScheduler integration for periodic maintenance jobs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from clevertap_sync.config import settings
from clevertap_sync.database import SessionLocal
from clevertap_sync.services.audit_cleanup import cleanup_old_access_logs

log = logging.getLogger(__name__)

AUDIT_CLEANUP_JOB_ID = "audit_cleanup_job"

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def audit_cleanup_job():
    """Prune administrator access logs past the retention window."""
    db = SessionLocal()
    try:
        deleted = cleanup_old_access_logs(db, days_to_keep=settings.audit_log_retention_days)
        log.info(f"Scheduled audit cleanup removed {deleted} entries")
    except Exception as e:
        log.error(f"Scheduled audit cleanup failed: {e}", exc_info=True)
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """Register maintenance jobs and start the scheduler."""
    if not settings.audit_cleanup_enabled:
        log.info("Audit cleanup disabled; scheduler not started")
        return

    scheduler.add_job(
        audit_cleanup_job,
        IntervalTrigger(hours=settings.audit_cleanup_hours),
        id=AUDIT_CLEANUP_JOB_ID,
        replace_existing=True
    )
    if not scheduler.running:
        scheduler.start()
        log.info(f"APScheduler started: audit cleanup every {settings.audit_cleanup_hours}h")


def shutdown_scheduler():
    """Shutdown the APScheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        log.info("APScheduler shut down successfully")
