from typing import Annotated, Optional
import logging
from fastapi import APIRouter, Depends, Request, Query
from sqlalchemy.orm import Session

from clevertap_sync.database import get_db
from clevertap_sync.models.sync_event import SyncEvent
from clevertap_sync.services.sync_service import SyncService
from clevertap_sync.schemas.sync import SyncRequest, SyncResponse, PaginatedSyncEvents
from clevertap_sync.schemas.auth import User
from clevertap_sync.auth import get_current_active_user
from clevertap_sync.utils.audit_logger import create_audit_log

log = logging.getLogger(__name__)
router = APIRouter()


def get_sync_service(db: Session = Depends(get_db)) -> SyncService:
    return SyncService(db)


@router.post("/run", response_model=SyncResponse)
async def run_sync(
    http_request: Request,
    request: SyncRequest,
    db: Session = Depends(get_db),
    sync_service: SyncService = Depends(get_sync_service),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Synchronize a batch of records to CleverTap. Per-record failures land in the sync event log."""
    create_audit_log(
        db=db,
        request=http_request,
        action="sync_triggered",
        user=current_user.username if current_user else None,
        details={"records": len(request.records), "entity_type": request.entity_type}
    )

    log.info(f"Sync request received for {len(request.records)} records")
    stats = await sync_service.synchronize_batch(request.records, entity_type=request.entity_type)

    if stats["config_errors"] and not stats["succeeded"]:
        status_text, message = "failed", "Sync aborted by configuration errors"
    elif stats["failed"] or stats["config_errors"]:
        status_text, message = "partial", f"Synchronized {stats['succeeded']} of {stats['processed']} records"
    else:
        status_text, message = "success", f"Successfully synchronized {stats['succeeded']} records"

    return SyncResponse(
        status=status_text,
        message=message,
        num_processed=stats["processed"],
        num_succeeded=stats["succeeded"],
        num_failed=stats["failed"],
        num_skipped=stats["skipped"],
        config_errors=stats["config_errors"]
    )


@router.get("/events", response_model=PaginatedSyncEvents)
async def read_sync_events(
    skip: int = 0,
    limit: int = 50,
    record_id: Optional[str] = Query(None, description="Filter by originating record id"),
    record_type: Optional[str] = Query(None, description="Filter by record type, e.g. 'Lead'"),
    status: Optional[str] = Query(None, description="'Success' or 'Failed'"),
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Sync event history, newest first."""
    query = db.query(SyncEvent)
    if record_id:
        query = query.filter(SyncEvent.record_id == record_id)
    if record_type:
        query = query.filter(SyncEvent.record_type == record_type)
    if status and status != "all":
        query = query.filter(SyncEvent.status == status)

    total = query.count()
    events = query.order_by(SyncEvent.created_at.desc(), SyncEvent.id.desc()).offset(skip).limit(limit).all()
    return {"data": events, "total": total}
