from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

import httpx


class BaseProvider(ABC):
    """Base class for upstream text-generation providers.

    Subclasses can accept an external httpx.AsyncClient for connection
    pooling, or create their own per request if not provided.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        """Initialize the provider.

        Args:
            base_url: The API base URL
            api_key: The API key for authentication
            http_client: Optional shared HTTP client for connection pooling
            timeout: Request timeout in seconds
        """
        self._http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.headers = self._build_headers()

    @property
    def http_client(self) -> Optional[httpx.AsyncClient]:
        return self._http_client

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    @asynccontextmanager
    async def _client_context(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Yield the shared client, or a per-request client that is closed after use."""
        if self._http_client is not None:
            yield self._http_client
            return
        client = httpx.AsyncClient(timeout=self.timeout)
        try:
            yield client
        finally:
            await client.aclose()

    def _get_endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the generated text.

        Raises:
            UpstreamError: If the upstream call fails for any reason
        """
        pass
