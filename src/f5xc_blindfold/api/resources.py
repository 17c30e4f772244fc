"""Fetching sealing inputs from the F5 Distributed Cloud API.

Both resources come back wrapped in a ``{"data": ...}`` envelope.  A ``404``
is not an error; it yields ``None``.
"""
from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from f5xc_blindfold.core.errors import (
    APITransportError,
    Forbidden,
    MalformedAPIResponse,
    Unauthorized,
    UnexpectedAPIStatus,
)
from f5xc_blindfold.core.types import (
    PolicyDocument,
    PolicyDocumentEnvelope,
    PublicKey,
    PublicKeyEnvelope,
)

logger = logging.getLogger(__name__)

PUBLIC_KEY_URL = "/api/secret_management/get_public_key"
SECRET_POLICY_DOCUMENT_URL = (
    "/api/secret_management/namespaces/{namespace}/secret_policys/{name}/get_policy_document"
)


async def envelope_api_call(
    client: httpx.AsyncClient,
    request: httpx.Request,
    envelope_type: type[PublicKeyEnvelope] | type[PolicyDocumentEnvelope],
) -> PublicKey | PolicyDocument | None:
    """Send *request* and unwrap the enveloped resource from the response.

    Raises
    ------
    APITransportError
        If the request fails below the HTTP layer.
    Unauthorized
        On 401.
    Forbidden
        On 403.
    UnexpectedAPIStatus
        On any status other than 200, 401, 403 and 404.
    MalformedAPIResponse
        If a 200 body is not a valid envelope.
    """
    logger.debug("Calling API %s", request.url)
    try:
        response = await client.send(request)
    except httpx.HTTPError as exc:
        raise APITransportError(
            f"failure making API call: {exc}", details={"url": str(request.url)},
        ) from exc
    status = response.status_code
    if status == httpx.codes.OK:
        try:
            envelope = envelope_type.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedAPIResponse(
                f"failed to unmarshal JSON: {exc.error_count()} errors",
                details={"url": str(request.url)},
            ) from exc
        return envelope.data
    if status == httpx.codes.UNAUTHORIZED:
        raise Unauthorized(details={"url": str(request.url)})
    if status == httpx.codes.FORBIDDEN:
        raise Forbidden(details={"url": str(request.url)})
    if status == httpx.codes.NOT_FOUND:
        return None
    raise UnexpectedAPIStatus(
        f"unexpected HTTP status code {status}",
        details={"url": str(request.url), "status_code": status},
    )


async def get_public_key(
    client: httpx.AsyncClient,
    version: int | None = None,
) -> PublicKey | None:
    """Return the tenant's public key, optionally at a specific *version*."""
    logger.debug("Retrieving Public Key, version %s", version)
    params = {"key_version": version} if version is not None else None
    request = client.build_request("GET", PUBLIC_KEY_URL, params=params)
    return await envelope_api_call(client, request, PublicKeyEnvelope)


async def get_secret_policy_document(
    client: httpx.AsyncClient,
    name: str,
    namespace: str,
) -> PolicyDocument | None:
    """Return the policy document for secret policy *name* in *namespace*."""
    logger.debug("Retrieving Policy Document %s/%s", namespace, name)
    url = SECRET_POLICY_DOCUMENT_URL.format(namespace=namespace, name=name)
    request = client.build_request("GET", url)
    return await envelope_api_call(client, request, PolicyDocumentEnvelope)
