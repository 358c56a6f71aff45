"""httpx client construction shared by upstream adapters."""

from __future__ import annotations

import httpx

# One viewer process talks to one Zendesk account; a small pool is plenty.
POOL_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5, keepalive_expiry=30.0)
MAX_CONNECT_SECONDS = 5.0


def timeouts_for(seconds: float) -> httpx.Timeout:
    """Read/write get the full budget; connect and pool wait are capped so dead hosts fail fast."""
    total = float(seconds)
    connect = min(MAX_CONNECT_SECONDS, total)
    return httpx.Timeout(connect=connect, read=total, write=total, pool=connect)


def build_async_client(
    base_url: httpx.URL,
    *,
    timeout_seconds: float,
    verify_tls: bool,
    trust_env: bool,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Accept": "application/json"},
        timeout=timeouts_for(timeout_seconds),
        limits=POOL_LIMITS,
        verify=verify_tls,
        trust_env=trust_env,
        # Upstream links are rewritten locally; a redirect would point outside the API.
        follow_redirects=False,
    )
