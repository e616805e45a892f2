"""Outbound HTTP client used by provider adapters."""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_TIMEOUT_SECONDS = 10.0


def create_http_client(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    """Create an AsyncClient with a bounded timeout for provider calls.

    Adapters use it as an async context manager, one client per call, so no
    connection state is shared between login attempts.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"Accept": "application/json"},
    )


def response_text(resp: Any) -> str:
    """Best-effort body text of a failed response, for diagnostics."""
    try:
        return str(resp.text)
    except Exception:
        return "Unknown error"


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "create_http_client", "response_text"]
