"""Upstream providers for PostGuard.

This package provides:
- Base provider interface (BaseProvider)
- Anthropic Messages API provider (AnthropicProvider)
- Mock provider for development (MockProvider)
- create_provider to build the configured provider
"""

from typing import Optional

import httpx

from postguard.app.core.config import Settings
from postguard.app.core.logging import get_logger
from postguard.app.providers.anthropic import AnthropicProvider
from postguard.app.providers.base import BaseProvider
from postguard.app.providers.mock import MockProvider

logger = get_logger(__name__)


def create_provider(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BaseProvider:
    """Create the upstream provider selected by settings."""
    if settings.mock_provider:
        logger.info("Using mock provider")
        return MockProvider(http_client=http_client)

    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; upstream calls will fail")

    return AnthropicProvider(
        base_url=settings.anthropic_base_url,
        api_key=settings.anthropic_api_key,
        http_client=http_client,
        timeout=settings.httpx_read_timeout,
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
        api_version=settings.anthropic_version,
    )


__all__ = [
    "BaseProvider",
    "AnthropicProvider",
    "MockProvider",
    "create_provider",
]
