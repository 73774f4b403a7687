"""Shared httpx client for token endpoint and metadata server requests."""

import asyncio
from contextlib import asynccontextmanager

import httpx

from cloudauth.config.settings import get_config

# Pooled client shared by every provider in the process
_client: httpx.AsyncClient | None = None
_client_loop: asyncio.AbstractEventLoop | None = None

POOL_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5)


def get_timeout_config() -> httpx.Timeout:
    """Build the token request timeout from ``[http]`` settings."""
    http = get_config().http
    return httpx.Timeout(http.timeout, connect=http.connect_timeout)


def get_probe_timeout() -> httpx.Timeout:
    """Build the short timeout used when probing for a metadata server."""
    return httpx.Timeout(get_config().metadata.probe_timeout)


def _build_client() -> httpx.AsyncClient:
    # A redirect from a token endpoint surfaces as a non-200 response
    return httpx.AsyncClient(
        timeout=get_timeout_config(),
        limits=POOL_LIMITS,
        follow_redirects=False,
    )


@asynccontextmanager
async def get_http_client():
    """Yield the shared client, creating it on first use.

    The client stays open after the block exits. It is bound to the running
    event loop; a call from a different loop gets a fresh client.

    Usage:
        async with get_http_client() as client:
            response = await client.post(...)
    """
    global _client, _client_loop

    loop = asyncio.get_running_loop()
    if _client is None or _client.is_closed or _client_loop is not loop:
        _client = _build_client()
        _client_loop = loop
    yield _client


async def cleanup() -> None:
    """Close and forget the shared client, if one was created."""
    global _client, _client_loop
    client, _client = _client, None
    _client_loop = None
    if client is not None:
        await client.aclose()
