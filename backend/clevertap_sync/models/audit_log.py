"""Audit log model for tracking administrator operations."""

from sqlalchemy import Column, Integer, String, DateTime, Index, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from clevertap_sync.database import Base


class AuditLog(Base):
    """Audit trail for administrator operations and sync triggers."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Action details
    action = Column(String(100), nullable=False)  # 'sync_triggered', 'connection_created', 'sync_config_deleted', ...
    entity_type = Column(String(50), nullable=True)  # 'connection', 'sync_configuration'
    entity_id = Column(Integer, nullable=True)

    # User and context
    user = Column(String(100), nullable=True)
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # IP tracking (for web UI access audit)
    ip_address = Column(String(45), nullable=True)  # Supports IPv6
    user_agent = Column(String, nullable=True)

    # Timestamp
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        Index('idx_audit_logs_action', 'action'),
        Index('idx_audit_logs_ip_created', 'ip_address', 'created_at'),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity='{self.entity_type}')>"
