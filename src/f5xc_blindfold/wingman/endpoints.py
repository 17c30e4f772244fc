"""Wingman REST API endpoints."""
from __future__ import annotations

import httpx

from f5xc_blindfold.core.config import DEFAULT_WINGMAN_URL
from f5xc_blindfold.core.errors import InvalidEndpointURL

__all__ = ["DEFAULT_WINGMAN_URL", "STATUS_ENDPOINT", "UNSEAL_ENDPOINT", "build_url"]

STATUS_ENDPOINT = "/status"
UNSEAL_ENDPOINT = "/secret/unseal"


def build_url(base_url: str, path: str) -> httpx.URL:
    """Join *path* onto the Wingman *base_url*.

    Raises
    ------
    InvalidEndpointURL
        If the result is not an absolute http(s) URL with a host.
    """
    try:
        url = httpx.URL(f"{base_url.rstrip('/')}{path}")
    except httpx.InvalidURL as exc:
        raise InvalidEndpointURL(
            f"invalid wingman URL {base_url!r}: {exc}",
            details={"url": base_url},
        ) from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointURL(
            f"wingman URL must be absolute http(s): {base_url!r}",
            details={"url": base_url},
        )
    return url
