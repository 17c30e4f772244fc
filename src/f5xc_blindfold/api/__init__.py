"""F5 Distributed Cloud API access for sealing inputs.

* **create_client** -- certificate- or token-authenticated ``httpx``
  client (:mod:`~f5xc_blindfold.api.client`).
* **get_public_key / get_secret_policy_document** -- fetch the resources
  vesctl needs (:mod:`~f5xc_blindfold.api.resources`).
"""
from __future__ import annotations

from f5xc_blindfold.api.client import (
    API_CONTENT_TYPE,
    build_ssl_context,
    create_client,
    validate_api_url,
)
from f5xc_blindfold.api.resources import (
    PUBLIC_KEY_URL,
    SECRET_POLICY_DOCUMENT_URL,
    envelope_api_call,
    get_public_key,
    get_secret_policy_document,
)

__all__ = [
    "API_CONTENT_TYPE",
    "PUBLIC_KEY_URL",
    "SECRET_POLICY_DOCUMENT_URL",
    "build_ssl_context",
    "create_client",
    "envelope_api_call",
    "get_public_key",
    "get_secret_policy_document",
    "validate_api_url",
]
