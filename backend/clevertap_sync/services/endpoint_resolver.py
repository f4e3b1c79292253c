import logging
from typing import Mapping, Optional

from clevertap_sync.constants.regions import REGION_ENDPOINTS
from clevertap_sync.exceptions import ConfigError

log = logging.getLogger(__name__)


class EndpointResolver:
    """Maps a connection's region code to its CleverTap upload URL."""

    def __init__(self, region_table: Optional[Mapping[str, str]] = None):
        table = REGION_ENDPOINTS if region_table is None else region_table
        self.region_table = {code.upper(): url for code, url in table.items()}

    def resolve_url(self, region_code: Optional[str]) -> str:
        """Case-insensitive lookup; an unknown region is a static misconfiguration and raises ConfigError."""
        code = (region_code or "").strip().upper()
        url = self.region_table.get(code)
        if url is None:
            known = ", ".join(sorted(self.region_table))
            error_msg = f"Unknown CleverTap region {region_code!r} (expected one of: {known})"
            log.error(error_msg)
            raise ConfigError(error_msg, details={"region": region_code})
        return url
