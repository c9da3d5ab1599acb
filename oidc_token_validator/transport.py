"""
HTTP transport boundary for calls to the identity provider.

Timeouts are owned by the ``httpx.Client``; the validator itself never retries.
"""

from contextlib import nullcontext
from typing import Optional

import httpx

from .shared.errors import ConnectivityError
from .shared.logging import get_logger

logger = get_logger("oidc.transport")

DEFAULT_TIMEOUT = 10.0


def create_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    """Create the HTTP client used for discovery, JWK set and introspection calls."""
    return httpx.Client(
        timeout=timeout,
        headers={"Accept": "application/json"},
    )


def client_scope(client: Optional[httpx.Client], timeout: float = DEFAULT_TIMEOUT):
    """Context manager yielding ``client``, or a fresh client closed on exit."""
    if client is not None:
        return nullcontext(client)
    return create_http_client(timeout)


def fetch_json(client: httpx.Client, url: str) -> httpx.Response:
    """GET ``url`` expecting a JSON document.

    Transport failures become ``ConnectivityError``; the status code and body
    are left for the caller to interpret.
    """
    logger.debug("Sending HTTP request to identity provider", url=url)
    try:
        return client.get(url, headers={"Accept": "application/json"})
    except httpx.TransportError as exc:
        logger.error("Could not connect to identity provider", url=url, error=str(exc))
        raise ConnectivityError(url, str(exc)) from exc
