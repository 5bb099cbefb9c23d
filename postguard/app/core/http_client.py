"""Shared HTTP client management for connection pooling.

The client is created on application startup and handed to the upstream
provider for the lifetime of the app.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx

from postguard.app.core.config import settings


def _build_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        connect=settings.httpx_connect_timeout,
        read=settings.httpx_read_timeout,
        write=settings.httpx_write_timeout,
        pool=settings.httpx_pool_timeout,
    )


def _build_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=settings.httpx_max_connections,
        max_keepalive_connections=settings.httpx_max_keepalive_connections,
        keepalive_expiry=settings.httpx_keepalive_expiry,
    )


@asynccontextmanager
async def init_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create, yield and finally close the pooled HTTP client.

    Used in the FastAPI lifespan:

        async with init_http_client() as client:
            yield
    """
    client = httpx.AsyncClient(timeout=_build_timeout(), limits=_build_limits())
    try:
        yield client
    finally:
        await client.aclose()
