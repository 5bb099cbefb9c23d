"""Mock provider for development and testing.

Returns canned posts without calling the upstream API.

Enable by setting environment variable:
    MOCK_PROVIDER=true
"""

import asyncio
import hashlib
from typing import Any, Optional

from postguard.app.exceptions import UpstreamError
from postguard.app.providers.base import BaseProvider


class MockProvider(BaseProvider):
    """Mock provider that returns simulated generations.

    Responses are derived from the prompt so the same input always produces
    the same output. ``fail`` makes every call raise, for exercising the
    upstream-failure path.
    """

    def __init__(
        self,
        base_url: str = "http://mock.provider",
        api_key: str = "mock-key",
        http_client: Optional[Any] = None,
        timeout: float = 60.0,
        delay: float = 0.0,
        fail: bool = False,
    ):
        super().__init__(base_url, api_key, http_client, timeout)
        self.delay = delay
        self.fail = fail
        self.calls = 0

    async def generate(self, prompt: str) -> str:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise UpstreamError("Mock provider failure", upstream_status=503)

        digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:8]
        return f"[mock-{digest}] Here is a fresh take on your post."
