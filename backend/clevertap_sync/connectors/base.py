from abc import ABC, abstractmethod
from typing import Dict, Any

import httpx


class BaseConnector(ABC):
    """Abstract Base Class for outbound platform connectors."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    async def send(self, body: str) -> httpx.Response:
        """Posts an already serialized upload body and returns the raw response."""
        pass

    @abstractmethod
    async def validate_connection(self) -> bool:
        """Validates the credentials against the external system."""
        pass

    async def close(self) -> None:
        """Releases network resources held by the connector."""
        pass
