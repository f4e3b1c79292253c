"""Connection model for CleverTap account credentials."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.sql import func
from clevertap_sync.database import Base

DELETED_LABEL_PREFIX = "[Deleted] "


class Connection(Base):
    """CleverTap project connection (account id, passcode and regional endpoint)."""

    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(255), nullable=False)
    api_name = Column(String(80), nullable=False, unique=True, index=True)  # Never recycled, survives soft delete
    account_id = Column(String(100), nullable=True)
    passcode = Column(Text, nullable=True)  # Encrypted
    region = Column(String(10), nullable=True)
    api_url = Column(String(255), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def soft_delete(self) -> None:
        """Mark as deleted and clear every sensitive field; the api_name stays reserved."""
        if not self.label.startswith(DELETED_LABEL_PREFIX):
            self.label = f"{DELETED_LABEL_PREFIX}{self.label}"
        self.account_id = None
        self.passcode = None
        self.region = None
        self.api_url = None
        self.is_deleted = True

    def __repr__(self):
        return f"<Connection(id={self.id}, api_name='{self.api_name}', region='{self.region}')>"
