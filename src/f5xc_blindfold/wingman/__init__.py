"""Client for the F5 XC Wingman sidecar.

This subpackage provides:

* **wait_for_ready** -- poll ``/status`` until Wingman reports ``READY``
  (:mod:`~f5xc_blindfold.wingman.status`).
* **unseal / unseal_encoded** -- recover plaintext from blindfold data via
  ``/secret/unseal`` (:mod:`~f5xc_blindfold.wingman.unseal`).

The ``default_*`` variants talk to a sidecar Wingman at
``http://localhost:8070`` with a fresh client.
"""
from __future__ import annotations

from f5xc_blindfold.wingman.endpoints import (
    DEFAULT_WINGMAN_URL,
    STATUS_ENDPOINT,
    UNSEAL_ENDPOINT,
    build_url,
)
from f5xc_blindfold.wingman.status import (
    DEFAULT_POLL_INTERVAL_S,
    READY_BODY,
    default_wait_for_ready,
    wait_for_ready,
)
from f5xc_blindfold.wingman.unseal import (
    UNSEAL_CONTENT_TYPE,
    build_unseal_request,
    classify_response,
    default_unseal,
    default_unseal_encoded,
    unseal,
    unseal_encoded,
)

__all__ = [
    # Endpoints
    "DEFAULT_WINGMAN_URL",
    "STATUS_ENDPOINT",
    "UNSEAL_ENDPOINT",
    "build_url",
    # Readiness
    "DEFAULT_POLL_INTERVAL_S",
    "READY_BODY",
    "default_wait_for_ready",
    "wait_for_ready",
    # Unseal
    "UNSEAL_CONTENT_TYPE",
    "build_unseal_request",
    "classify_response",
    "default_unseal",
    "default_unseal_encoded",
    "unseal",
    "unseal_encoded",
]
