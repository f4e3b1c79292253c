from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.models.connection import Connection
from clevertap_sync.utils.encrypt import decrypt_data

CONNECTIONS_URL = "/api/v1/connections/"


def create(client: TestClient, label="Production EU", region="eu", **overrides):
    payload = {"label": label, "region": region, "account_id": "TEST-ACC-123", "passcode": "test-passcode"}
    payload.update(overrides)
    return client.post(CONNECTIONS_URL, json=payload)


def test_create_connection(client, db_session):
    response = create(client)

    assert response.status_code == 201
    data = response.json()
    assert data["label"] == "Production EU"
    assert data["api_name"] == "Production_EU"
    assert data["region"] == "EU"
    assert data["api_url"] == "https://eu1.api.clevertap.com/1/upload"
    assert data["passcode"] == "********"

    stored = db_session.query(Connection).filter(Connection.id == data["id"]).one()
    assert stored.passcode != "test-passcode"
    assert decrypt_data(stored.passcode) == "test-passcode"

    audit = db_session.query(AuditLog).filter(AuditLog.action == "connection_created").one()
    assert audit.entity_id == data["id"]
    assert audit.user == "admin"


def test_unknown_region_is_rejected(client, db_session):
    response = create(client, region="XX")

    assert response.status_code == 400
    assert "Unknown CleverTap region" in response.json()["detail"]
    assert db_session.query(Connection).count() == 0


@pytest.mark.parametrize("label,api_name", [
    ("My  Shop / EU", "My_Shop_EU"),
    ("123 Shop", "C_123_Shop"),
    ("__Staging__", "Staging"),
])
def test_api_name_generation(client, label, api_name):
    assert create(client, label=label).json()["api_name"] == api_name


def test_api_name_collision_gets_suffix(client):
    first = create(client).json()
    second = create(client).json()

    assert first["api_name"] == "Production_EU"
    assert second["api_name"] == "Production_EU_1"


def test_list_and_get(client):
    created = create(client).json()

    listed = client.get(CONNECTIONS_URL).json()
    assert [c["id"] for c in listed] == [created["id"]]
    assert listed[0]["passcode"] == "********"

    response = client.get(f"{CONNECTIONS_URL}{created['id']}")
    assert response.status_code == 200
    assert response.json()["api_name"] == "Production_EU"


def test_get_missing_connection(client):
    assert client.get(f"{CONNECTIONS_URL}999").status_code == 404


def test_soft_delete(client, db_session):
    created = create(client).json()

    response = client.delete(f"{CONNECTIONS_URL}{created['id']}")
    assert response.status_code == 204

    assert client.get(CONNECTIONS_URL).json() == []
    assert client.get(f"{CONNECTIONS_URL}{created['id']}").status_code == 404

    stored = db_session.query(Connection).filter(Connection.id == created["id"]).one()
    assert stored.is_deleted is True
    assert stored.label == "[Deleted] Production EU"
    assert stored.account_id is None
    assert stored.passcode is None
    assert stored.api_name == "Production_EU"

    assert db_session.query(AuditLog).filter(AuditLog.action == "connection_deleted").count() == 1


def test_deleted_api_name_is_not_recycled(client):
    created = create(client).json()
    client.delete(f"{CONNECTIONS_URL}{created['id']}")

    assert create(client).json()["api_name"] == "Production_EU_1"


def test_delete_twice(client):
    created = create(client).json()

    assert client.delete(f"{CONNECTIONS_URL}{created['id']}").status_code == 204
    assert client.delete(f"{CONNECTIONS_URL}{created['id']}").status_code == 404


def test_connection_check_success(client):
    created = create(client).json()

    with patch(
        "clevertap_sync.api.v1.endpoints.connections.CleverTapConnector.validate_connection",
        new=AsyncMock(return_value=True),
    ):
        response = client.post(f"{CONNECTIONS_URL}{created['id']}/test")

    assert response.status_code == 200
    assert response.json() == {"valid": True, "message": "Connection successful!"}


def test_connection_check_failure(client):
    created = create(client).json()

    with patch(
        "clevertap_sync.api.v1.endpoints.connections.CleverTapConnector.validate_connection",
        new=AsyncMock(return_value=False),
    ):
        response = client.post(f"{CONNECTIONS_URL}{created['id']}/test")

    assert response.json()["valid"] is False


def test_connection_check_with_broken_region(client, db_session):
    created = create(client).json()
    stored = db_session.query(Connection).filter(Connection.id == created["id"]).one()
    stored.region = "XX"
    db_session.commit()

    response = client.post(f"{CONNECTIONS_URL}{created['id']}/test")

    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["message"].startswith("Configuration error")
