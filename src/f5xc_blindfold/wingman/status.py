"""Waiting for the Wingman sidecar to report ready."""
from __future__ import annotations

import asyncio
import logging

import httpx

from f5xc_blindfold.core.errors import WingmanNotReady
from f5xc_blindfold.wingman.endpoints import DEFAULT_WINGMAN_URL, STATUS_ENDPOINT, build_url

logger = logging.getLogger(__name__)

READY_BODY = b"READY"
DEFAULT_POLL_INTERVAL_S = 10.0


async def _probe(client: httpx.AsyncClient, url: httpx.URL) -> bool:
    """Return True if a single status request reports READY."""
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.debug("Failure during status request, ignoring: %s", exc)
        return False
    body = response.content
    logger.debug("Wingman status response %d received", response.status_code)
    return response.status_code == httpx.codes.OK and body == READY_BODY


async def wait_for_ready(
    client: httpx.AsyncClient,
    endpoint: str,
    interval: float,
    *,
    timeout: float | None = None,
) -> None:
    """Poll Wingman's status endpoint until it answers 200 with body ``READY``.

    The first probe is sent immediately.  Transport errors, other status
    codes and other bodies are ignored and polling continues every
    *interval* seconds.

    Parameters
    ----------
    client:
        HTTP client suitable for reaching Wingman.
    endpoint:
        Wingman base URL; ``/status`` is appended.
    interval:
        Seconds to sleep between failed probes.
    timeout:
        Overall deadline in seconds.  ``None`` polls until the task is
        cancelled, in which case ``CancelledError`` propagates.

    Raises
    ------
    InvalidEndpointURL
        If a status URL cannot be built from *endpoint*; raised before any
        probe is sent.
    WingmanNotReady
        If the deadline expires first.  An in-flight probe is abandoned.
    """
    url = build_url(endpoint, STATUS_ENDPOINT)
    logger.debug("Waiting for wingman at %s to be ready, interval %ss", url, interval)
    try:
        async with asyncio.timeout(timeout):
            while not await _probe(client, url):
                logger.debug("Wingman is not ready, sleeping")
                await asyncio.sleep(interval)
    except TimeoutError as exc:
        raise WingmanNotReady(
            f"wingman at {endpoint} was not ready within {timeout}s",
            details={"endpoint": endpoint, "timeout_s": timeout},
        ) from exc
    logger.debug("Wingman status is READY")


async def default_wait_for_ready(*, timeout: float | None = None) -> None:
    """Poll the default sidecar Wingman every 10 seconds until it is ready."""
    async with httpx.AsyncClient() as client:
        await wait_for_ready(
            client, DEFAULT_WINGMAN_URL, DEFAULT_POLL_INTERVAL_S, timeout=timeout,
        )
