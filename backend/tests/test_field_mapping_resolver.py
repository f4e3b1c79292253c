from datetime import datetime

import pytest

from clevertap_sync.services.field_mapping_resolver import FieldMappingResolver, MappingSpec, ResolvedConfig


@pytest.fixture
def resolver(db_session):
    return FieldMappingResolver(db_session)


def test_resolves_active_configuration(resolver, make_config):
    config = make_config("Lead", connection_name="Production")

    resolved = resolver.resolve("Lead")

    assert resolved.config_id == config.id
    assert resolved.connection_name == "Production"
    assert [m.target_field for m in resolved.mappings] == ["customer_id", "last_name", "company"]
    assert resolved.identifier_mapping.source_field == "Email"
    assert [m.target_field for m in resolved.attribute_mappings] == ["last_name", "company"]
    assert resolved.is_usable


def test_entity_match_is_case_insensitive(resolver, make_config):
    make_config("Lead")

    assert resolver.resolve("lead") is not None
    assert resolver.resolve("LEAD") is not None


def test_inactive_configuration_is_ignored(resolver, make_config):
    make_config("Lead", status="Inactive")

    assert resolver.resolve("Lead") is None


def test_unknown_entity(resolver, make_config):
    make_config("Lead")

    assert resolver.resolve("Contact") is None


@pytest.mark.parametrize("entity_type", [None, "", "Lead; DROP TABLE", "1Lead", "Lead Object"])
def test_malformed_entity_type(resolver, make_config, entity_type):
    make_config("Lead")

    assert resolver.resolve(entity_type) is None


def test_earliest_configuration_wins(resolver, make_config):
    make_config("Lead", name="Newer", created_at=datetime(2024, 5, 1))
    older = make_config("Lead", name="Older", created_at=datetime(2024, 1, 1))

    assert resolver.resolve("Lead").config_id == older.id


def test_equal_timestamps_fall_back_to_lowest_id(resolver, make_config):
    first = make_config("Lead", name="First", created_at=datetime(2024, 1, 1))
    make_config("Lead", name="Second", created_at=datetime(2024, 1, 1))

    assert resolver.resolve("Lead").config_id == first.id


def test_inactive_older_configuration_does_not_shadow(resolver, make_config):
    make_config("Lead", name="Old", status="Inactive", created_at=datetime(2024, 1, 1))
    current = make_config("Lead", name="Current", created_at=datetime(2024, 5, 1))

    assert resolver.resolve("Lead").config_id == current.id


def test_configuration_without_identifier_is_not_usable(resolver, make_config):
    make_config("Lead", mappings=[("Email", "email", "Text", False)])

    resolved = resolver.resolve("Lead")

    assert resolved is not None
    assert resolved.identifier_mapping is None
    assert not resolved.is_usable


def test_optional_customer_id_is_not_an_identifier():
    mapping = MappingSpec(source_field="Email", target_field="customer_id", data_type="Text", is_mandatory=False)

    assert not mapping.is_identifier


def test_two_identifiers_are_not_usable():
    resolved = ResolvedConfig(
        config_id=1,
        name="Broken",
        source_entity="Lead",
        target_entity="profile",
        mappings=[
            MappingSpec(source_field="Email", target_field="customer_id", data_type="Text", is_mandatory=True),
            MappingSpec(source_field="Id", target_field="customer_id", data_type="Text", is_mandatory=True),
        ],
    )

    assert resolved.identifier_mapping is None
    assert not resolved.is_usable
