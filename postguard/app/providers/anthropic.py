from typing import Any, Dict, Optional

import httpx

from postguard.app.core.logging import get_logger
from postguard.app.exceptions import UpstreamError
from postguard.app.providers.base import BaseProvider

logger = get_logger(__name__)


class AnthropicProvider(BaseProvider):
    """Anthropic Messages API provider.

    If http_client is provided, it is used for all requests (connection
    reuse); otherwise a client is created per request.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 2000,
        api_version: str = "2023-06-01",
    ):
        self.api_version = api_version
        super().__init__(base_url, api_key, http_client, timeout)
        self.model = model
        self.max_tokens = max_tokens

    def _build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "user", "content": prompt}
            ],
        }

    async def generate(self, prompt: str) -> str:
        """Send the prompt to /v1/messages and return the first text block.

        Raises:
            UpstreamError: On transport errors, non-2xx responses or an
                unexpected response body
        """
        url = self._get_endpoint_url("/v1/messages")

        try:
            async with self._client_context() as client:
                resp = await client.post(url, headers=self.headers, json=self._build_payload(prompt))
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Anthropic API error: {status}")
            raise UpstreamError(f"Anthropic API error: {status}", upstream_status=status) from e
        except httpx.HTTPError as e:
            logger.error(f"Anthropic API request failed: {e}")
            raise UpstreamError(f"Anthropic API request failed: {type(e).__name__}") from e
        except ValueError as e:
            logger.error("Anthropic API returned a non-JSON body")
            raise UpstreamError("Anthropic API returned a non-JSON body") from e

        try:
            return data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Anthropic API returned an unexpected body")
            raise UpstreamError("Anthropic API returned an unexpected body") from e
