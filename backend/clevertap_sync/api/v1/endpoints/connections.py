from typing import List, Annotated
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

import logging

from clevertap_sync.database import get_db
from clevertap_sync.connectors.clevertap_connector import CleverTapConnector
from clevertap_sync.exceptions import ConfigError
from clevertap_sync.models.connection import Connection
from clevertap_sync.schemas.connection import ConnectionCreate, ConnectionInDB, ConnectionValidationResult
from clevertap_sync.schemas.auth import User
from clevertap_sync.auth import get_current_active_user
from clevertap_sync.services.connection_service import (
    create_connection as create_connection_record,
    list_connections,
    connector_config,
    soft_delete_connection,
)
from clevertap_sync.services.endpoint_resolver import EndpointResolver
from clevertap_sync.utils.audit_logger import create_audit_log
from clevertap_sync.utils.encrypt import mask_secret

log = logging.getLogger(__name__)

router = APIRouter()


def get_endpoint_resolver() -> EndpointResolver:
    return EndpointResolver()


def _to_response(connection: Connection) -> ConnectionInDB:
    """Response copy with the passcode masked; the ORM object is left untouched."""
    response = ConnectionInDB.model_validate(connection)
    return response.model_copy(update={"passcode": mask_secret(connection.passcode)})


def _get_live_connection(db: Session, connection_id: int) -> Connection:
    connection = db.query(Connection).filter(Connection.id == connection_id, Connection.is_deleted == False).first()  # noqa: E712
    if connection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection not found")
    return connection


@router.post("/", response_model=ConnectionInDB, status_code=status.HTTP_201_CREATED)
async def create_connection(
    request: Request,
    connection: ConnectionCreate,
    db: Session = Depends(get_db),
    endpoint_resolver: EndpointResolver = Depends(get_endpoint_resolver),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Create a CleverTap connection. The region must be one of the known regions."""
    try:
        db_connection = create_connection_record(db, connection, endpoint_resolver)
    except ConfigError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    create_audit_log(
        db=db,
        request=request,
        action="connection_created",
        entity_type="connection",
        entity_id=db_connection.id,
        user=current_user.username if current_user else None,
        details={"api_name": db_connection.api_name, "region": db_connection.region}
    )
    return _to_response(db_connection)


@router.get("/", response_model=List[ConnectionInDB])
async def read_connections(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """List connections, excluding soft-deleted ones."""
    return [_to_response(c) for c in list_connections(db, skip=skip, limit=limit)]


@router.get("/{connection_id}", response_model=ConnectionInDB)
async def read_connection(
    connection_id: int,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    return _to_response(_get_live_connection(db, connection_id))


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_connection(
    request: Request,
    connection_id: int,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Soft delete: the label is marked, credentials cleared, the api_name stays reserved."""
    connection = soft_delete_connection(db, _get_live_connection(db, connection_id))

    create_audit_log(
        db=db,
        request=request,
        action="connection_deleted",
        entity_type="connection",
        entity_id=connection.id,
        user=current_user.username if current_user else None,
        details={"api_name": connection.api_name}
    )
    return None


@router.post("/{connection_id}/test", response_model=ConnectionValidationResult)
async def test_connection(
    connection_id: int,
    db: Session = Depends(get_db),
    endpoint_resolver: EndpointResolver = Depends(get_endpoint_resolver),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Check the stored credentials against CleverTap."""
    connection = _get_live_connection(db, connection_id)
    try:
        connector = CleverTapConnector(connector_config(connection, endpoint_resolver))
    except ConfigError as e:
        return ConnectionValidationResult(valid=False, message=f"Configuration error: {e.message}")

    try:
        is_valid = await connector.validate_connection()
    finally:
        await connector.close()

    if is_valid:
        return ConnectionValidationResult(valid=True, message="Connection successful!")
    return ConnectionValidationResult(valid=False, message="Connection failed. Check account id, passcode or region.")
