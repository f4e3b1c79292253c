from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel

from clevertap_sync.schemas.record import SourceRecord


class SyncRequest(BaseModel):
    entity_type: Optional[str] = None  # Overrides each record's own type when set
    records: List[SourceRecord]


class SyncResponse(BaseModel):
    status: str  # 'success', 'partial', 'failed'
    message: str
    num_processed: int = 0
    num_succeeded: int = 0
    num_failed: int = 0
    num_skipped: int = 0
    config_errors: List[str] = []


class SyncEventInDB(BaseModel):
    id: int
    record_id: Optional[str] = None
    record_type: Optional[str] = None
    status: str
    response_trace: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaginatedSyncEvents(BaseModel):
    data: List[SyncEventInDB]
    total: int
