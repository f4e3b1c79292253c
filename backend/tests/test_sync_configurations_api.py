import pytest

from clevertap_sync.models.audit_log import AuditLog
from clevertap_sync.models.sync_configuration import FieldMapping, SyncConfiguration

CONFIGS_URL = "/api/v1/sync-configurations/"

LEAD_MAPPINGS = [
    {"source_field": "Email", "target_field": "customer_id", "data_type": "Text", "is_mandatory": True},
    {"source_field": "LastName", "target_field": "last_name"},
    {"source_field": "AnnualRevenue", "target_field": "annual_revenue", "data_type": "Number"},
]


def create(client, name="Lead to CleverTap", source_entity="Lead", mappings=None, **extra):
    payload = {
        "name": name,
        "source_entity": source_entity,
        "field_mappings": LEAD_MAPPINGS if mappings is None else mappings,
    }
    payload.update(extra)
    return client.post(CONFIGS_URL, json=payload)


def test_create_configuration(client, db_session):
    response = create(client, connection_name="Production")

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Active"
    assert data["direction"] == "outbound"
    assert data["target_entity"] == "profile"
    assert data["connection_name"] == "Production"
    assert [(m["target_field"], m["position"]) for m in data["field_mappings"]] == [
        ("customer_id", 0), ("last_name", 1), ("annual_revenue", 2),
    ]
    assert data["field_mappings"][1]["data_type"] == "Text"
    assert db_session.query(AuditLog).filter(AuditLog.action == "sync_config_created").count() == 1


def test_two_identifiers_are_rejected(client):
    mappings = LEAD_MAPPINGS + [
        {"source_field": "Id", "target_field": "customer_id", "data_type": "Text", "is_mandatory": True}
    ]

    assert create(client, mappings=mappings).status_code == 422


@pytest.mark.parametrize("source_entity", ["Lead Object", "1Lead", "Lead;"])
def test_invalid_source_entity(client, source_entity):
    assert create(client, source_entity=source_entity).status_code == 422


def test_unknown_data_type_is_rejected(client):
    mappings = [{"source_field": "Amount", "target_field": "amount", "data_type": "Currency"}]

    assert create(client, mappings=mappings).status_code == 422


def test_list_sorted_and_filtered(client):
    create(client, name="B leads", connection_name="Production")
    create(client, name="A contacts", source_entity="Contact", connection_name="Production")
    create(client, name="C accounts", source_entity="Account", connection_name="Staging")

    names = [c["name"] for c in client.get(CONFIGS_URL, params={"sort_by": "name"}).json()]
    assert names == ["A contacts", "B leads", "C accounts"]

    names = [c["name"] for c in client.get(CONFIGS_URL, params={"sort_by": "name", "sort_direction": "desc"}).json()]
    assert names == ["C accounts", "B leads", "A contacts"]

    entities = [c["source_entity"] for c in client.get(CONFIGS_URL, params={"sort_by": "source_entity"}).json()]
    assert entities == ["Account", "Contact", "Lead"]

    production = client.get(CONFIGS_URL, params={"connection_name": "Production"}).json()
    assert {c["name"] for c in production} == {"A contacts", "B leads"}


def test_invalid_sort_column(client):
    assert client.get(CONFIGS_URL, params={"sort_by": "passcode"}).status_code == 422


def test_get_missing_configuration(client):
    assert client.get(f"{CONFIGS_URL}999").status_code == 404


def test_status_toggle(client, db_session):
    config_id = create(client).json()["id"]

    response = client.patch(f"{CONFIGS_URL}{config_id}/status", json={"status": "Inactive"})
    assert response.status_code == 200
    assert response.json()["status"] == "Inactive"

    response = client.patch(f"{CONFIGS_URL}{config_id}/status", json={"status": "Active"})
    assert response.json()["status"] == "Active"

    assert client.patch(f"{CONFIGS_URL}{config_id}/status", json={"status": "Paused"}).status_code == 422
    audit = db_session.query(AuditLog).filter(AuditLog.action == "sync_config_status_changed").order_by(AuditLog.id).all()
    assert [a.details for a in audit] == [{"from": "Active", "to": "Inactive"}, {"from": "Inactive", "to": "Active"}]


def test_update_replaces_mappings(client, db_session):
    config_id = create(client).json()["id"]
    new_mappings = [
        {"source_field": "Id", "target_field": "customer_id", "is_mandatory": True},
        {"source_field": "Phone", "target_field": "phone"},
    ]

    response = client.patch(f"{CONFIGS_URL}{config_id}", json={"name": "Renamed", "field_mappings": new_mappings})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert [m["source_field"] for m in data["field_mappings"]] == ["Id", "Phone"]
    assert db_session.query(FieldMapping).count() == 2


def test_update_without_mappings_keeps_them(client):
    config_id = create(client).json()["id"]

    data = client.patch(f"{CONFIGS_URL}{config_id}", json={"connection_name": "Staging"}).json()

    assert data["connection_name"] == "Staging"
    assert len(data["field_mappings"]) == 3


def test_update_with_two_identifiers(client):
    config_id = create(client).json()["id"]
    mappings = [
        {"source_field": "Id", "target_field": "customer_id", "is_mandatory": True},
        {"source_field": "Email", "target_field": "customer_id", "is_mandatory": True},
    ]

    response = client.patch(f"{CONFIGS_URL}{config_id}", json={"name": "Renamed", "field_mappings": mappings})

    assert response.status_code == 422
    data = client.get(f"{CONFIGS_URL}{config_id}").json()
    assert data["name"] == "Lead to CleverTap"
    assert len(data["field_mappings"]) == 3


def test_delete_cascades_to_mappings(client, db_session):
    config_id = create(client).json()["id"]

    assert client.delete(f"{CONFIGS_URL}{config_id}").status_code == 204

    assert db_session.query(SyncConfiguration).count() == 0
    assert db_session.query(FieldMapping).count() == 0
    assert client.get(f"{CONFIGS_URL}{config_id}").status_code == 404
    assert db_session.query(AuditLog).filter(AuditLog.action == "sync_config_deleted").count() == 1
