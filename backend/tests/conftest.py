import os

from cryptography.fernet import Fernet

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["AUDIT_CLEANUP_ENABLED"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clevertap_sync.auth import get_current_active_user  # noqa: E402
from clevertap_sync.connectors.clevertap_connector import CleverTapConnector  # noqa: E402
from clevertap_sync.database import Base, get_db  # noqa: E402
from clevertap_sync.main import app  # noqa: E402
from clevertap_sync.models.sync_configuration import SyncConfiguration, FieldMapping  # noqa: E402
from clevertap_sync.schemas.auth import User  # noqa: E402
from clevertap_sync.schemas.connection import ConnectionCreate  # noqa: E402
from clevertap_sync.services.connection_service import create_connection  # noqa: E402
from clevertap_sync.services.endpoint_resolver import EndpointResolver  # noqa: E402

LEAD_MAPPINGS = [
    ("Email", "customer_id", "Text", True),
    ("LastName", "last_name", "Text", False),
    ("Company", "company", "Text", False),
]


@pytest.fixture
def db_session() -> Session:
    # One in-memory database per test, shared by every connection through StaticPool
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session: Session) -> TestClient:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = lambda: User(username="admin", disabled=False)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_connection(db_session: Session):
    def _make(label="Production", region="US", account_id="TEST-ACC-123", passcode="test-passcode"):
        data = ConnectionCreate(label=label, region=region, account_id=account_id, passcode=passcode)
        return create_connection(db_session, data, EndpointResolver())
    return _make


@pytest.fixture
def make_config(db_session: Session):
    def _make(source_entity="Lead", mappings=None, status="Active", connection_name=None, name=None, created_at=None):
        config = SyncConfiguration(
            name=name or f"{source_entity} to CleverTap",
            source_entity=source_entity,
            status=status,
            connection_name=connection_name,
        )
        if created_at is not None:
            config.created_at = created_at
        config.field_mappings = [
            FieldMapping(
                source_field=source_field,
                target_field=target_field,
                data_type=data_type,
                is_mandatory=is_mandatory,
                position=index,
            )
            for index, (source_field, target_field, data_type, is_mandatory) in enumerate(
                LEAD_MAPPINGS if mappings is None else mappings
            )
        ]
        db_session.add(config)
        db_session.commit()
        db_session.refresh(config)
        return config
    return _make


@pytest.fixture
def connector_factory():
    """Returns a builder of connector factories whose HTTP traffic goes to ``handler``."""
    def _factory(handler):
        transport = httpx.MockTransport(handler)
        return lambda config: CleverTapConnector(config, transport=transport)
    return _factory
