from __future__ import annotations

from typing import Optional

import httpx

_client: Optional[httpx.AsyncClient] = None

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "portal-accounts/0.1"


async def open_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the shared AsyncClient for outbound calls (the email API). Idempotent."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
        )
    return _client


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not opened; call open_http_client() at startup")
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
