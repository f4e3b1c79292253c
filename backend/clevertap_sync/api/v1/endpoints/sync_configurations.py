from typing import List, Annotated, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request, Query
from sqlalchemy.orm import Session, selectinload

from clevertap_sync.database import get_db
from clevertap_sync.models.sync_configuration import SyncConfiguration, FieldMapping
from clevertap_sync.schemas.sync_configuration import (
    FieldMappingCreate,
    SyncConfigurationCreate,
    SyncConfigurationUpdate,
    SyncConfigurationInDB,
    SyncStatusUpdate,
)
from clevertap_sync.schemas.auth import User
from clevertap_sync.auth import get_current_active_user
from clevertap_sync.utils.audit_logger import create_audit_log

router = APIRouter()

SORT_COLUMNS = {
    "name": SyncConfiguration.name,
    "source_entity": SyncConfiguration.source_entity,
    "target_entity": SyncConfiguration.target_entity,
    "status": SyncConfiguration.status,
    "created_at": SyncConfiguration.created_at,
}


def _build_mappings(mappings: List[FieldMappingCreate]) -> List[FieldMapping]:
    return [
        FieldMapping(
            source_field=m.source_field,
            target_field=m.target_field,
            data_type=m.data_type,
            is_mandatory=m.is_mandatory,
            position=index,
        )
        for index, m in enumerate(mappings)
    ]


def _get_config(db: Session, config_id: int) -> SyncConfiguration:
    config = db.query(SyncConfiguration).filter(SyncConfiguration.id == config_id).first()
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sync configuration not found")
    return config


@router.post("/", response_model=SyncConfigurationInDB, status_code=status.HTTP_201_CREATED)
async def create_sync_configuration(
    request: Request,
    config: SyncConfigurationCreate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Create a sync configuration together with its ordered field mappings."""
    db_config = SyncConfiguration(**config.model_dump(exclude={"field_mappings"}))
    db_config.field_mappings = _build_mappings(config.field_mappings)
    db.add(db_config)
    db.commit()
    db.refresh(db_config)

    create_audit_log(
        db=db,
        request=request,
        action="sync_config_created",
        entity_type="sync_configuration",
        entity_id=db_config.id,
        user=current_user.username if current_user else None,
        details={"source_entity": db_config.source_entity, "mappings": len(db_config.field_mappings)}
    )
    return db_config


@router.get("/", response_model=List[SyncConfigurationInDB])
async def read_sync_configurations(
    connection_name: Optional[str] = Query(None, description="Only configurations of this connection"),
    sort_by: Literal["name", "source_entity", "target_entity", "status", "created_at"] = "name",
    sort_direction: Literal["asc", "desc"] = "asc",
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """List sync configurations, optionally for one connection, sorted by a column."""
    query = db.query(SyncConfiguration).options(selectinload(SyncConfiguration.field_mappings))
    if connection_name:
        query = query.filter(SyncConfiguration.connection_name == connection_name)
    column = SORT_COLUMNS[sort_by]
    query = query.order_by(column.desc() if sort_direction == "desc" else column.asc(), SyncConfiguration.id.asc())
    return query.offset(skip).limit(limit).all()


@router.get("/{config_id}", response_model=SyncConfigurationInDB)
async def read_sync_configuration(
    config_id: int,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    return _get_config(db, config_id)


@router.patch("/{config_id}", response_model=SyncConfigurationInDB)
async def update_sync_configuration(
    request: Request,
    config_id: int,
    config: SyncConfigurationUpdate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Update a configuration. When field_mappings is given it replaces the whole mapping set."""
    db_config = _get_config(db, config_id)

    update_data = config.model_dump(exclude_unset=True, exclude={"field_mappings"})
    for key, value in update_data.items():
        setattr(db_config, key, value)

    if config.field_mappings is not None:
        db_config.field_mappings = _build_mappings(config.field_mappings)

    db.add(db_config)
    db.commit()
    db.refresh(db_config)

    updated_fields = list(update_data.keys())
    if config.field_mappings is not None:
        updated_fields.append("field_mappings")
    create_audit_log(
        db=db,
        request=request,
        action="sync_config_updated",
        entity_type="sync_configuration",
        entity_id=db_config.id,
        user=current_user.username if current_user else None,
        details={"updated_fields": updated_fields}
    )
    return db_config


@router.patch("/{config_id}/status", response_model=SyncConfigurationInDB)
async def update_sync_status(
    request: Request,
    config_id: int,
    body: SyncStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Activate or deactivate a configuration; deactivation is the normal way to stop a sync."""
    db_config = _get_config(db, config_id)
    previous = db_config.status
    db_config.status = body.status
    db.add(db_config)
    db.commit()
    db.refresh(db_config)

    create_audit_log(
        db=db,
        request=request,
        action="sync_config_status_changed",
        entity_type="sync_configuration",
        entity_id=db_config.id,
        user=current_user.username if current_user else None,
        details={"from": previous, "to": body.status}
    )
    return db_config


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sync_configuration(
    request: Request,
    config_id: int,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Delete a configuration and, by cascade, its field mappings."""
    db_config = _get_config(db, config_id)

    create_audit_log(
        db=db,
        request=request,
        action="sync_config_deleted",
        entity_type="sync_configuration",
        entity_id=db_config.id,
        user=current_user.username if current_user else None,
        details={"name": db_config.name, "source_entity": db_config.source_entity}
    )

    db.delete(db_config)
    db.commit()
    return None
