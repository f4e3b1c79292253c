"""Best-effort persistence of sync attempt outcomes."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx
from sqlalchemy.orm import Session

from clevertap_sync.models.sync_event import SyncEvent, STATUS_SUCCESS, STATUS_FAILED

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class SyncEventSchema:
    """
    Describes which record types have a dedicated reference column on the
    sync event table. Computed once at startup from the mapped table, so the
    logger never has to probe the storage at write time.
    """
    version: int = SCHEMA_VERSION
    record_columns: Dict[str, str] = field(default_factory=dict)  # lowercase record type -> column name

    @classmethod
    def from_model(cls, model=SyncEvent) -> "SyncEventSchema":
        columns = {}
        for column in model.__table__.columns:
            if column.name.endswith("_id") and column.name not in ("id", "record_id"):
                record_type = column.name[: -len("_id")].replace("_", "")
                columns[record_type] = column.name
        return cls(record_columns=columns)

    def column_for(self, record_type: Optional[str]) -> Optional[str]:
        if not record_type:
            return None
        return self.record_columns.get(record_type.lower())


DEFAULT_SCHEMA = SyncEventSchema.from_model()


def derive_status(response: Optional[httpx.Response]) -> str:
    """Success only for an actual response with status code exactly 200."""
    if response is not None and response.status_code == 200:
        return STATUS_SUCCESS
    return STATUS_FAILED


class SyncEventLogger:
    """Appends one SyncEvent per synchronization attempt. Never raises."""

    def __init__(self, db: Session, schema: SyncEventSchema = DEFAULT_SCHEMA):
        self.db = db
        self.schema = schema

    def build_trace(
        self,
        record_id: Optional[str],
        record_type: Optional[str],
        response: Optional[httpx.Response],
        request_body: Optional[str],
        detail: Optional[str] = None,
        attempted: bool = False,
    ) -> str:
        parts = []
        if response is not None:
            parts.append(f"Response ({response.status_code}): {response.text}")
            parts.append(f"Request: {request_body or ''}")
        else:
            state = "no response" if attempted else "not sent"
            parts.append(f"{record_type} {record_id} request ({state}): {request_body or ''}")
        if detail:
            parts.append(f"Detail: {detail}")
        if self.schema.column_for(record_type) is None:
            parts.insert(0, f"Record: {record_type} {record_id}")
        return "\n".join(parts)

    def log(
        self,
        record_id: Optional[str],
        record_type: Optional[str],
        response: Optional[httpx.Response],
        request_body: Optional[str],
        detail: Optional[str] = None,
        attempted: bool = False,
    ) -> Optional[SyncEvent]:
        """
        Persist the attempt. ``attempted`` marks a request that was sent but got no
        response. Storage failures are logged and swallowed; returns None in that case.
        """
        try:
            event = SyncEvent(
                record_id=record_id,
                record_type=record_type,
                status=derive_status(response),
                response_trace=self.build_trace(record_id, record_type, response, request_body, detail, attempted),
            )
            column = self.schema.column_for(record_type)
            if column is not None:
                setattr(event, column, record_id)

            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
            log.debug(f"Logged {event.status} sync event {event.id} for {record_type} {record_id}")
            return event
        except Exception as e:
            log.error(f"Failed to log sync event for {record_type} {record_id}: {e}", exc_info=True)
            try:
                self.db.rollback()
            except Exception as rollback_error:
                log.error(f"Rollback after sync event failure also failed: {rollback_error}")
            return None
