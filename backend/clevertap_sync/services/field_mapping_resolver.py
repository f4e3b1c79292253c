import logging
import re
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from clevertap_sync.models.sync_configuration import SyncConfiguration, STATUS_ACTIVE

log = logging.getLogger(__name__)

IDENTIFIER_TARGET = "customer_id"
_ENTITY_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class MappingSpec(BaseModel):
    """Detached copy of a FieldMapping row."""
    source_field: str
    target_field: str
    data_type: str
    is_mandatory: bool = False

    @property
    def is_identifier(self) -> bool:
        return self.is_mandatory and self.target_field == IDENTIFIER_TARGET


class ResolvedConfig(BaseModel):
    """
    Snapshot of the applicable SyncConfiguration and its mappings in declaration order.

    Resolved once per batch and shared read-only between the records of that batch.
    """
    config_id: int
    name: str
    source_entity: str
    target_entity: str
    connection_name: Optional[str] = None
    mappings: List[MappingSpec] = []

    @property
    def identifier_mapping(self) -> Optional[MappingSpec]:
        identifiers = [m for m in self.mappings if m.is_identifier]
        return identifiers[0] if len(identifiers) == 1 else None

    @property
    def attribute_mappings(self) -> List[MappingSpec]:
        return [m for m in self.mappings if not m.is_identifier]

    @property
    def is_usable(self) -> bool:
        """A configuration can only be dispatched with exactly one mandatory customer_id mapping."""
        return self.identifier_mapping is not None


class FieldMappingResolver:
    """Looks up the active sync configuration for an entity type."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, entity_type: Optional[str]) -> Optional[ResolvedConfig]:
        """
        Return the applicable configuration for ``entity_type`` or None.

        When several Active configurations exist for the same entity, the
        earliest created one wins (lowest id on equal timestamps).
        """
        if not entity_type or not _ENTITY_NAME.match(entity_type):
            log.warning(f"Ignoring malformed entity type {entity_type!r}")
            return None

        candidates = (
            self.db.query(SyncConfiguration)
            .options(selectinload(SyncConfiguration.field_mappings))
            .filter(
                func.lower(SyncConfiguration.source_entity) == entity_type.lower(),
                SyncConfiguration.status == STATUS_ACTIVE,
            )
            .order_by(SyncConfiguration.created_at.asc(), SyncConfiguration.id.asc())
            .all()
        )
        if not candidates:
            log.debug(f"No active sync configuration for entity {entity_type}")
            return None
        if len(candidates) > 1:
            log.warning(
                f"{len(candidates)} active sync configurations for {entity_type}; "
                f"using '{candidates[0].name}' (id {candidates[0].id})"
            )

        config = candidates[0]
        resolved = ResolvedConfig(
            config_id=config.id,
            name=config.name,
            source_entity=config.source_entity,
            target_entity=config.target_entity,
            connection_name=config.connection_name,
            mappings=[
                MappingSpec(
                    source_field=m.source_field,
                    target_field=m.target_field,
                    data_type=m.data_type,
                    is_mandatory=m.is_mandatory,
                )
                for m in sorted(config.field_mappings, key=lambda m: (m.position, m.id))
            ],
        )
        log.trace(f"Resolved config '{resolved.name}' for {entity_type} with {len(resolved.mappings)} mappings")
        return resolved
