"""HTTP client profiles for talking to the Ollama backend."""

import httpx

from ..version import short_version

USER_AGENT = f"ollama-mcp/{short_version()}"


def create_http_client(base_url: str, *, custom_profile: bool = False) -> httpx.AsyncClient:
    """Create the async HTTP client used for every backend call.

    The default profile sets no timeout at all: per-call deadlines are
    owned by the dispatcher, and model pulls must be allowed to run for as
    long as the caller waits.

    The custom profile is tuned for long-running inference calls: a
    bounded idle-connection pool and generous read timeouts.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/x-ndjson"}

    if not custom_profile:
        return httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=httpx.Timeout(None)
        )

    limits = httpx.Limits(
        max_connections=100,
        max_keepalive_connections=10,
        keepalive_expiry=60.0,
    )
    timeout = httpx.Timeout(
        connect=10.0,  # Also bounds the TLS handshake
        read=300.0,  # Time to first byte of a response
        write=60.0,
        pool=600.0,
    )
    return httpx.AsyncClient(
        base_url=base_url, headers=headers, limits=limits, timeout=timeout
    )
