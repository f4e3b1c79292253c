from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from clevertap_sync import scheduler
from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.models.sync_event import SyncEvent
from clevertap_sync.services.audit_cleanup import cleanup_old_access_logs, get_audit_log_stats


@pytest.fixture
def seeded(db_session):
    old = datetime.now() - timedelta(days=200)
    db_session.add_all([
        AuditLog(action="connection_created", entity_type="connection", created_at=old),
        AuditLog(action="sync_triggered", created_at=old),
        AuditLog(action="connection_deleted", entity_type="connection"),
        SyncEvent(record_id="00Q1", record_type="Lead", status="Success", created_at=old),
    ])
    db_session.commit()
    return db_session


def test_cleanup_removes_only_old_access_logs(seeded):
    deleted = cleanup_old_access_logs(seeded, days_to_keep=90)

    assert deleted == 1
    remaining = sorted(a.action for a in seeded.query(AuditLog).all())
    assert remaining == ["connection_deleted", "sync_triggered"]
    assert seeded.query(SyncEvent).count() == 1


def test_stats(seeded):
    stats = get_audit_log_stats(seeded)

    assert stats["total_logs"] == 3
    assert stats["access_logs"] == 2
    assert stats["sync_logs"] == 1
    assert stats["sync_events"] == 1
    assert stats["oldest_sync_event"] is not None


def test_audit_logs_endpoint(client, seeded):
    logs = client.get("/api/v1/audit-logs/", params={"action_type": "access"}).json()
    assert sorted(log["action"] for log in logs) == ["connection_created", "connection_deleted"]

    sync_logs = client.get("/api/v1/audit-logs/", params={"action_type": "sync"}).json()
    assert [log["action"] for log in sync_logs] == ["sync_triggered"]

    log_id = sync_logs[0]["id"]
    assert client.get(f"/api/v1/audit-logs/{log_id}").json()["action"] == "sync_triggered"
    assert client.get("/api/v1/audit-logs/999").status_code == 404


def test_scheduler_disabled_registers_no_job():
    with patch.object(scheduler.settings, "audit_cleanup_enabled", False):
        scheduler.start_scheduler()

    assert scheduler.scheduler.get_job(scheduler.AUDIT_CLEANUP_JOB_ID) is None
    assert not scheduler.scheduler.running


def test_stats_endpoint(client, seeded):
    stats = client.get("/api/v1/audit-logs/stats").json()

    assert stats["access_logs"] == 2
    assert stats["sync_events"] == 1
