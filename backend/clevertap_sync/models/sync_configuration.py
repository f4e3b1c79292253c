"""Sync configuration and field mapping models."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clevertap_sync.database import Base

STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
DIRECTION_OUTBOUND = "outbound"


class SyncConfiguration(Base):
    """Administrator-defined rule: one CRM entity type synchronizes to one CleverTap entity."""

    __tablename__ = "sync_configurations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    source_entity = Column(String(100), nullable=False, index=True)  # 'Lead', 'Contact', 'Account', ...
    target_entity = Column(String(100), nullable=False, default="profile")
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE, index=True)  # 'Active' | 'Inactive'
    direction = Column(String(20), nullable=False, default=DIRECTION_OUTBOUND)
    connection_name = Column(String(80), nullable=True, index=True)  # Connection.api_name, weak reference
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    field_mappings = relationship(
        "FieldMapping",
        back_populates="sync_configuration",
        cascade="all, delete-orphan",
        order_by="FieldMapping.position",
    )

    __table_args__ = (
        Index('idx_sync_configurations_source_status', 'source_entity', 'status'),
    )

    def __repr__(self):
        return f"<SyncConfiguration(id={self.id}, source='{self.source_entity}', status='{self.status}')>"


class FieldMapping(Base):
    """One source field to target field rule within a sync configuration."""

    __tablename__ = "field_mappings"

    id = Column(Integer, primary_key=True, index=True)
    sync_configuration_id = Column(
        Integer, ForeignKey("sync_configurations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_field = Column(String(255), nullable=False)
    target_field = Column(String(255), nullable=False)
    data_type = Column(String(20), nullable=False, default="Text")  # 'Text', 'Number', 'Date', 'DateTime', 'Boolean'
    is_mandatory = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sync_configuration = relationship("SyncConfiguration", back_populates="field_mappings")

    def __repr__(self):
        return f"<FieldMapping(id={self.id}, {self.source_field}->{self.target_field}, type='{self.data_type}')>"
