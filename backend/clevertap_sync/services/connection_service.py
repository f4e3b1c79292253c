"""Connection bookkeeping shared by the admin API and the sync engine."""

import logging
import re
from typing import Any, Dict, List, Optional

from cryptography.fernet import InvalidToken
from sqlalchemy.orm import Session

from clevertap_sync.exceptions import ConfigError
from clevertap_sync.models.connection import Connection, DELETED_LABEL_PREFIX
from clevertap_sync.schemas.connection import ConnectionCreate
from clevertap_sync.services.endpoint_resolver import EndpointResolver
from clevertap_sync.utils.encrypt import encrypt_data, decrypt_data

log = logging.getLogger(__name__)

API_NAME_MAX_LENGTH = 40


def generate_api_name(db: Session, label: str) -> str:
    """
    Derive a stable programmatic name from a label: alphanumerics and single
    underscores, starting with a letter. Names of soft-deleted connections stay
    taken, so a numeric suffix is added on collision.
    """
    base = re.sub(r"[^A-Za-z0-9]+", "_", label).strip("_")
    if not base or not base[0].isalpha():
        base = f"C_{base}".rstrip("_")
    base = base[:API_NAME_MAX_LENGTH].rstrip("_")

    taken = {
        row.api_name
        for row in db.query(Connection.api_name).filter(Connection.api_name.like(f"{base}%")).all()
    }
    candidate = base
    counter = 1
    while candidate in taken:
        suffix = f"_{counter}"
        candidate = f"{base[:API_NAME_MAX_LENGTH - len(suffix)]}{suffix}"
        counter += 1
    return candidate


def create_connection(db: Session, data: ConnectionCreate, endpoint_resolver: EndpointResolver) -> Connection:
    """Create a connection; an unknown region raises ConfigError before anything is stored."""
    api_url = endpoint_resolver.resolve_url(data.region)
    connection = Connection(
        label=data.label.strip(),
        api_name=generate_api_name(db, data.label),
        account_id=data.account_id.strip(),
        passcode=encrypt_data(data.passcode),
        region=data.region.strip().upper(),
        api_url=api_url,
        is_deleted=False,
    )
    db.add(connection)
    db.commit()
    db.refresh(connection)
    log.info(f"Created connection '{connection.api_name}' in region {connection.region}")
    return connection


def list_connections(db: Session, skip: int = 0, limit: int = 100) -> List[Connection]:
    """Connections that are not soft-deleted (flag and label convention)."""
    return (
        db.query(Connection)
        .filter(Connection.is_deleted == False, ~Connection.label.startswith(DELETED_LABEL_PREFIX))  # noqa: E712
        .order_by(Connection.created_at.asc(), Connection.id.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_active_connection(db: Session, api_name: Optional[str]) -> Connection:
    """
    The connection a sync configuration points at. Without a name the oldest
    live connection is used. Raises ConfigError when none is usable.
    """
    query = db.query(Connection).filter(Connection.is_deleted == False)  # noqa: E712
    if api_name:
        connection = query.filter(Connection.api_name == api_name).first()
    else:
        connection = query.order_by(Connection.created_at.asc(), Connection.id.asc()).first()
    if connection is None:
        raise ConfigError(
            f"No active CleverTap connection named {api_name!r}" if api_name else "No active CleverTap connection configured",
            details={"connection_name": api_name},
        )
    return connection


def connector_config(connection: Connection, endpoint_resolver: EndpointResolver) -> Dict[str, Any]:
    """Decrypted connector settings for a connection, raising ConfigError when they are incomplete."""
    if not connection.account_id or not connection.passcode:
        raise ConfigError(
            f"Connection '{connection.api_name}' has no account id or passcode",
            details={"connection_name": connection.api_name},
        )
    try:
        passcode = decrypt_data(connection.passcode)
    except InvalidToken:
        raise ConfigError(
            f"Passcode of connection '{connection.api_name}' cannot be decrypted with the configured key",
            details={"connection_name": connection.api_name},
        )
    return {
        "base_url": endpoint_resolver.resolve_url(connection.region),
        "account_id": connection.account_id,
        "passcode": passcode,
    }


def soft_delete_connection(db: Session, connection: Connection) -> Connection:
    connection.soft_delete()
    db.add(connection)
    db.commit()
    db.refresh(connection)
    log.info(f"Soft-deleted connection '{connection.api_name}'")
    return connection
