import httpx
import logging
from typing import Dict, Any, Optional

from clevertap_sync.connectors.base import BaseConnector
from clevertap_sync.config import settings
from clevertap_sync.exceptions import TransportError

log = logging.getLogger(__name__)

EMPTY_UPLOAD = '{"d":[]}'


class CleverTapConnector(BaseConnector):
    """
    Connector for the CleverTap upload API.

    Expects config keys:
    - base_url: regional upload URL (from EndpointResolver)
    - account_id: CleverTap project account id
    - passcode: decrypted project passcode

    Every call is attempted exactly once. Non-2xx responses are returned to
    the caller as-is; only network failures and timeouts raise.
    """

    def __init__(self, config: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self.base_url = self.config["base_url"]
        self.account_id = self.config["account_id"]
        self.passcode = self.config["passcode"]  # Already decrypted by the caller

        self.client = httpx.AsyncClient(
            timeout=self.config.get("timeout", settings.request_timeout_seconds),
            transport=transport,
        )
        self.headers = {
            "X-CleverTap-Account-Id": self.account_id,
            "X-CleverTap-Passcode": self.passcode,
            "Content-Type": "application/json; charset=utf-8",
        }

        log.debug(f"CleverTap connector initialized for account {self.account_id} at {self.base_url}")

    async def send(self, body: str) -> httpx.Response:
        """POST a serialized upload body; raises TransportError when no response is received."""
        try:
            log.trace(f"CleverTap API POST {self.base_url}: {body}")
            response = await self.client.post(self.base_url, content=body.encode("utf-8"), headers=self.headers)
            log.trace(f"CleverTap API response: {response.status_code} {response.text}")
        except httpx.TimeoutException as e:
            error_msg = f"CleverTap request timed out for {self.base_url}: {e}"
            log.error(error_msg)
            raise TransportError(error_msg, details={"url": self.base_url, "timeout": True})
        except httpx.RequestError as e:
            error_msg = f"CleverTap request error for {self.base_url}: {e}"
            log.error(error_msg)
            raise TransportError(error_msg, details={"url": self.base_url})

        if response.status_code == 401:
            log.error(f"CleverTap authentication failed for account {self.account_id}: {response.text}")
        elif not response.is_success:
            log.warning(f"CleverTap HTTP {response.status_code} for {self.base_url}: {response.text}")
        return response

    async def validate_connection(self) -> bool:
        """Upload an empty batch; CleverTap answers 200 only for valid credentials."""
        try:
            response = await self.send(EMPTY_UPLOAD)
        except TransportError:
            return False
        return response.status_code == 200

    async def close(self) -> None:
        await self.client.aclose()
