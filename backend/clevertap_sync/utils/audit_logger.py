"""Audit logging helper for administrator actions."""

import logging
from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.orm import Session

from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.utils.ip_extractor import get_client_ip, get_user_agent

log = logging.getLogger(__name__)


def create_audit_log(
    db: Session,
    request: Request,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    user: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create audit log entry with automatic IP and user agent extraction.

    Args:
        db: Database session
        request: FastAPI Request object (for IP/user-agent extraction)
        action: Action being performed (e.g., 'connection_created', 'sync_config_status_changed')
        entity_type: Type of entity affected (e.g., 'connection', 'sync_configuration')
        entity_id: ID of affected entity
        user: Username performing the action
        details: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user=user,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request)
    )

    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    log.debug(f"Audit: {action} {entity_type or ''} {entity_id or ''} by {user}")

    return audit_log
