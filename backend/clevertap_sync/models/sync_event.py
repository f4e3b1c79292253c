"""Sync event model: append-only outcome of one synchronization attempt."""

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.sql import func
from clevertap_sync.database import Base

STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"


class SyncEvent(Base):
    """Audit record of a record upload to CleverTap. Written only by SyncEventLogger."""

    __tablename__ = "sync_events"

    id = Column(Integer, primary_key=True, index=True)

    # Originating record (weak reference by id)
    record_id = Column(String(100), nullable=True, index=True)
    record_type = Column(String(100), nullable=True, index=True)

    # Record-type specific references
    account_id = Column(String(100), nullable=True)
    contact_id = Column(String(100), nullable=True)
    lead_id = Column(String(100), nullable=True)
    opportunity_id = Column(String(100), nullable=True)

    # Outcome
    status = Column(String(20), nullable=False, index=True)  # 'Success' | 'Failed'
    response_trace = Column(Text, nullable=True)

    # Timestamp
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        Index('idx_sync_events_record_type_status', 'record_type', 'status'),
    )

    def __repr__(self):
        return f"<SyncEvent(id={self.id}, record='{self.record_type}:{self.record_id}', status='{self.status}')>"
