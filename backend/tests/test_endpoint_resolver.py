import pytest

from clevertap_sync.constants.regions import REGION_ENDPOINTS
from clevertap_sync.exceptions import ConfigError
from clevertap_sync.services.endpoint_resolver import EndpointResolver


@pytest.mark.parametrize("region,url", [
    ("US", "https://us1.api.clevertap.com/1/upload"),
    ("IN", "https://in1.api.clevertap.com/1/upload"),
    ("EU", "https://eu1.api.clevertap.com/1/upload"),
    ("eu", "https://eu1.api.clevertap.com/1/upload"),
    (" in ", "https://in1.api.clevertap.com/1/upload"),
])
def test_known_regions(region, url):
    assert EndpointResolver().resolve_url(region) == url


@pytest.mark.parametrize("region", ["XX", "", None, "SG"])
def test_unknown_region_raises_config_error(region):
    with pytest.raises(ConfigError) as exc_info:
        EndpointResolver().resolve_url(region)
    assert exc_info.value.details == {"region": region}


def test_injected_region_table():
    resolver = EndpointResolver({"sg": "https://sg1.api.clevertap.com/1/upload"})

    assert resolver.resolve_url("SG") == "https://sg1.api.clevertap.com/1/upload"
    with pytest.raises(ConfigError):
        resolver.resolve_url("US")


def test_region_table_is_read_only():
    with pytest.raises(TypeError):
        REGION_ENDPOINTS["XX"] = "https://example.com"
