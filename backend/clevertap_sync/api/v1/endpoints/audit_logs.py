from typing import List, Annotated, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from clevertap_sync.database import get_db
from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.schemas.audit import AuditLogInDB
from clevertap_sync.schemas.auth import User
from clevertap_sync.auth import get_current_active_user
from clevertap_sync.services.audit_cleanup import get_audit_log_stats

router = APIRouter()


@router.get("/", response_model=List[AuditLogInDB])
async def read_audit_logs(
    skip: int = 0,
    limit: int = 100,
    action: Optional[str] = Query(None, description="Filter by specific action"),
    action_type: Optional[str] = Query(None, description="Filter by action type: 'access', 'sync', or 'all'"),
    entity_type: Optional[str] = Query(None, description="Filter by entity type, e.g. 'connection'"),
    start_date: Optional[str] = Query(None, description="Filter created_at >= YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="Filter created_at <= YYYY-MM-DD"),
    user: Optional[str] = Query(None, description="Filter by username"),
    current_user: Annotated[User, Depends(get_current_active_user)] = None,
    db: Session = Depends(get_db)
):
    """Retrieve audit logs with optional filters."""
    query = db.query(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())

    if action:
        query = query.filter(AuditLog.action == action)

    # Sync logs: actions starting with 'sync'; access logs: everything else
    if action_type == 'access':
        query = query.filter(~AuditLog.action.like('sync%'))
    elif action_type == 'sync':
        query = query.filter(AuditLog.action.like('sync%'))

    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if start_date:
        query = query.filter(AuditLog.created_at >= datetime.fromisoformat(f"{start_date}T00:00:00"))
    if end_date:
        query = query.filter(AuditLog.created_at <= datetime.fromisoformat(f"{end_date}T23:59:59"))
    if user:
        query = query.filter(AuditLog.user == user)

    return query.offset(skip).limit(limit).all()


@router.get("/stats")
async def read_audit_log_stats(
    current_user: Annotated[User, Depends(get_current_active_user)] = None,
    db: Session = Depends(get_db)
):
    """Counts used to check the retention policy: access logs are pruned, sync logs and events are not."""
    return get_audit_log_stats(db)


@router.get("/{log_id}", response_model=AuditLogInDB)
async def read_audit_log(
    log_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)] = None,
    db: Session = Depends(get_db)
):
    """Retrieve a single audit log by ID."""
    db_log = db.query(AuditLog).filter(AuditLog.id == log_id).first()
    if db_log is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Audit log not found")
    return db_log
