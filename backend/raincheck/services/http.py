"""Shared HTTP plumbing for provider clients.

Translates httpx outcomes into the pipeline's error taxonomy so that the
geocoding and forecast stages can decide between recovering and propagating
based on error kind alone.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from .errors import NetworkError, ProviderAuthError, ProviderError

logger = logging.getLogger(__name__)

# HTTP timeout for provider requests (seconds).
REQUEST_TIMEOUT = 10.0

# Longest slice of a provider error body kept in messages.
BODY_PREVIEW_CHARS = 300


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient],
    timeout: float = REQUEST_TIMEOUT,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a fresh one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as fresh:
        yield fresh


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any],
    label: str = "Request",
) -> Any:
    """GET url and return the decoded JSON body.

    Raises:
        ProviderAuthError: the provider answered 401.
        ProviderError: any other non-success status, a timeout, or a body
            that is not JSON.
        NetworkError: the request never reached the provider.
    """
    logger.debug("%s: GET %s", label, url)
    try:
        resp = await client.get(url, params=params)
    except httpx.TimeoutException as exc:
        raise ProviderError(f"{label} timed out: {exc}") from exc
    except httpx.TransportError as exc:
        raise NetworkError(f"{label} failed: network unavailable ({exc})") from exc

    if resp.status_code == 401:
        raise ProviderAuthError(label, body=resp.text)

    if resp.status_code >= 400:
        body = resp.text.strip()
        msg = f"{label} failed ({resp.status_code})"
        if body:
            msg += f": {body[:BODY_PREVIEW_CHARS]}"
        raise ProviderError(msg, status=resp.status_code, body=body)

    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError(
            f"{label} returned invalid JSON",
            status=resp.status_code,
            body=resp.text,
        ) from exc
