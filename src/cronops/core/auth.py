"""HTTP client construction for the scheduler service.

This module centralizes creation of the shared `httpx.AsyncClient` so every
registry request carries the same base URL, credentials and timeout.
"""

from __future__ import annotations

from typing import Any

import httpx

from cronops.core.config import ConsoleConfig

USER_AGENT = "cronops-cli"


def _auth_headers(config: ConsoleConfig) -> dict[str, str]:
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return headers


def get_client(
    config: ConsoleConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create and return an async HTTP client bound to the scheduler host.

    Cookies and the bearer token are attached to the client itself, so they
    accompany every request including the job list fetch. The caller owns
    the client and must close it (`await client.aclose()`).
    """
    kwargs: dict[str, Any] = {
        "base_url": config.host,
        "headers": _auth_headers(config),
        "cookies": dict(config.cookies),
    }
    if config.timeout is not None:
        kwargs["timeout"] = httpx.Timeout(config.timeout)
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)
