"""Unsealing blindfolded data through Wingman.

Wingman's unseal endpoint takes the sealed payload as a ``string:///`` URI
inside a small JSON document and answers with the base64 plaintext.  The
status code carries the policy decision:

* ``200`` -- plaintext in the body.
* ``403`` -- denied by the policy used when sealing.
* ``503`` -- Wingman is not ready; the body explains why.
* anything else -- unexpected; the body is kept for diagnosis.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging

import httpx

from f5xc_blindfold.core.errors import (
    MalformedUnsealResponse,
    PolicyDenied,
    ServiceNotReady,
    UnexpectedStatus,
    WingmanTransportError,
)
from f5xc_blindfold.wingman.endpoints import DEFAULT_WINGMAN_URL, UNSEAL_ENDPOINT, build_url

logger = logging.getLogger(__name__)

UNSEAL_CONTENT_TYPE = "application/json"
_REQUEST_PREFIX = b'{"type":"blindfold","location":"string:///'
_REQUEST_SUFFIX = b'"}'


def build_unseal_request(sealed: bytes) -> bytes:
    """Return the unseal request body for base64 *sealed* data.

    *sealed* is embedded verbatim; base64 text needs no JSON escaping.
    """
    return _REQUEST_PREFIX + bytes(sealed) + _REQUEST_SUFFIX


def _decode_plaintext(body: bytes) -> bytes:
    try:
        return base64.b64decode(body.replace(b"\r", b"").replace(b"\n", b""), validate=True)
    except binascii.Error as exc:
        raise MalformedUnsealResponse(f"failed to decode response body: {exc}") from exc


def classify_response(response: httpx.Response) -> bytes:
    """Map a Wingman unseal response to plaintext or a typed error.

    Raises
    ------
    PolicyDenied
        On 403.
    ServiceNotReady
        On 503, carrying the response body as diagnostic text.
    UnexpectedStatus
        On any other non-200 status, carrying code and body.
    MalformedUnsealResponse
        On 200 with a body that is not base64.
    """
    status = response.status_code
    if status == httpx.codes.OK:
        return _decode_plaintext(response.content)
    if status == httpx.codes.FORBIDDEN:
        raise PolicyDenied(details={"status_code": status})
    text = response.content.decode("utf-8", errors="replace")
    if status == httpx.codes.SERVICE_UNAVAILABLE:
        raise ServiceNotReady(
            f"{text}: wingman is not ready",
            details={"status_code": status, "body": text},
        )
    raise UnexpectedStatus(
        f"unexpected HTTP status code {status}: message {text!r}",
        details={"status_code": status, "body": text},
    )


async def unseal_encoded(
    client: httpx.AsyncClient,
    endpoint: str,
    sealed: bytes,
    *,
    timeout: float | None = None,
) -> bytes:
    """Unseal base64 encoded blindfold data, returning the raw plaintext.

    The sealed bytes are embedded in the request as-is; use :func:`unseal`
    when the data still has to be base64 encoded.

    Parameters
    ----------
    client:
        HTTP client suitable for reaching Wingman.
    endpoint:
        Wingman base URL; ``/secret/unseal`` is appended.
    sealed:
        Base64 sealed data, e.g. as printed by vesctl.
    timeout:
        Deadline in seconds for the request.

    Raises
    ------
    InvalidEndpointURL
        If *endpoint* cannot form a valid URL.
    WingmanTransportError
        If the request fails or exceeds *timeout*.
    PolicyDenied, ServiceNotReady, UnexpectedStatus, MalformedUnsealResponse
        From :func:`classify_response`.
    """
    url = build_url(endpoint, UNSEAL_ENDPOINT)
    logger.debug("Preparing unseal request for %s", url)
    body = build_unseal_request(sealed)
    try:
        async with asyncio.timeout(timeout):
            response = await client.post(
                url,
                content=body,
                headers={"Content-Type": UNSEAL_CONTENT_TYPE},
            )
    except TimeoutError as exc:
        raise WingmanTransportError(
            f"unseal request to {url} timed out after {timeout}s",
            details={"endpoint": endpoint, "timeout_s": timeout},
        ) from exc
    except httpx.HTTPError as exc:
        raise WingmanTransportError(
            f"failure during unseal request: {exc}",
            details={"endpoint": endpoint},
        ) from exc
    logger.debug("Processing unseal response with status %d", response.status_code)
    return classify_response(response)


async def unseal(
    client: httpx.AsyncClient,
    endpoint: str,
    sealed: bytes,
    *,
    timeout: float | None = None,
) -> bytes:
    """Unseal raw blindfold data, base64 encoding it before sending.

    Use :func:`unseal_encoded` for data that is already base64, such as
    vesctl output, to avoid double encoding.
    """
    logger.debug("Building unseal payload from unencoded source")
    return await unseal_encoded(
        client, endpoint, base64.b64encode(sealed), timeout=timeout,
    )


async def default_unseal(sealed: bytes, *, timeout: float | None = None) -> bytes:
    """:func:`unseal` against a sidecar Wingman on port 8070."""
    async with httpx.AsyncClient() as client:
        return await unseal(client, DEFAULT_WINGMAN_URL, sealed, timeout=timeout)


async def default_unseal_encoded(sealed: bytes, *, timeout: float | None = None) -> bytes:
    """:func:`unseal_encoded` against a sidecar Wingman on port 8070."""
    async with httpx.AsyncClient() as client:
        return await unseal_encoded(client, DEFAULT_WINGMAN_URL, sealed, timeout=timeout)
