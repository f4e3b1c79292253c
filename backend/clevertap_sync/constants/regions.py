"""CleverTap regional upload endpoints.

The table is versioned with the service and not editable at runtime; it is
injected into ``EndpointResolver`` rather than read as global state.
"""

from types import MappingProxyType
from typing import Mapping

REGION_ENDPOINTS: Mapping[str, str] = MappingProxyType({
    "US": "https://us1.api.clevertap.com/1/upload",
    "IN": "https://in1.api.clevertap.com/1/upload",
    "EU": "https://eu1.api.clevertap.com/1/upload",
})
