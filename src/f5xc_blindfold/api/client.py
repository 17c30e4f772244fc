"""Authenticated HTTP client for the F5 Distributed Cloud API.

:func:`create_client` returns an ``httpx.AsyncClient`` bound to a tenant API
URL and authenticated either with a client certificate (PKCS#12 bundle or
PEM cert/key pair) or with an API token.
"""
from __future__ import annotations

import logging
import os
import ssl
import tempfile
from collections.abc import Sequence
from pathlib import Path

import httpx
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from f5xc_blindfold.core.errors import (
    CertificateError,
    InvalidEndpointURL,
    MissingAuthentication,
    MissingURL,
)

logger = logging.getLogger(__name__)

API_CONTENT_TYPE = "application/json"
DEFAULT_API_TIMEOUT_S = 30.0


def validate_api_url(api_url: str | None) -> httpx.URL:
    """Return *api_url* parsed, requiring an https URL with a host.

    Raises
    ------
    MissingURL
        If *api_url* is empty.
    InvalidEndpointURL
        If it cannot be parsed, is not https, or has no host.
    """
    if not api_url:
        raise MissingURL()
    try:
        url = httpx.URL(api_url)
    except httpx.InvalidURL as exc:
        raise InvalidEndpointURL(
            f"parsing error: {exc}", details={"url": api_url},
        ) from exc
    if url.scheme != "https":
        raise InvalidEndpointURL("scheme must be https", details={"url": api_url})
    if not url.host:
        raise InvalidEndpointURL("host must be present", details={"url": api_url})
    return url


def _load_p12(context: ssl.SSLContext, path: str | os.PathLike[str], passphrase: str) -> None:
    """Load a PKCS#12 bundle as the client identity and trust its CA chain."""
    logger.debug("Adding PKCS#12 certificate %s as authenticator", path)
    try:
        raw = Path(path).read_bytes()
        key, cert, ca_certs = pkcs12.load_key_and_certificates(
            raw, passphrase.encode("utf-8") if passphrase else None,
        )
    except (OSError, ValueError) as exc:
        raise CertificateError(
            f"failed to decode P12 file {path}: {exc}", details={"path": str(path)},
        ) from exc
    if key is None or cert is None:
        raise CertificateError(
            f"P12 file {path} has no certificate and key", details={"path": str(path)},
        )
    for ca_cert in ca_certs:
        context.load_verify_locations(
            cadata=ca_cert.public_bytes(serialization.Encoding.PEM).decode("ascii"),
        )
    # ssl can only load a client identity from files; they live just long
    # enough to be read.
    with tempfile.TemporaryDirectory() as tmp_dir:
        cert_file = Path(tmp_dir, "cert.pem")
        key_file = Path(tmp_dir, "key.pem")
        cert_file.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
        fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            ))
        context.load_cert_chain(cert_file, key_file)


def build_ssl_context(
    *,
    p12_path: str | os.PathLike[str] | None = None,
    p12_passphrase: str = "",
    cert_path: str | os.PathLike[str] | None = None,
    key_path: str | os.PathLike[str] | None = None,
    ca_cert_paths: Sequence[str | os.PathLike[str]] = (),
) -> tuple[ssl.SSLContext, bool]:
    """Build a TLS 1.2+ context from the system trust store.

    Returns
    -------
    tuple[ssl.SSLContext, bool]
        The context and whether a client certificate was loaded.

    Raises
    ------
    CertificateError
        If any certificate, key or CA file cannot be loaded.
    """
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    has_identity = False
    try:
        for ca_cert in ca_cert_paths:
            logger.debug("Adding CA certificate %s to pool", ca_cert)
            context.load_verify_locations(cafile=ca_cert)
        if p12_path is not None:
            _load_p12(context, p12_path, p12_passphrase)
            has_identity = True
        elif cert_path is not None and key_path is not None:
            logger.debug("Adding client certificate %s", cert_path)
            context.load_cert_chain(cert_path, key_path)
            has_identity = True
    except (OSError, ValueError) as exc:
        raise CertificateError(f"failed to load certificate material: {exc}") from exc
    return context, has_identity


def create_client(
    api_url: str | None,
    *,
    p12_path: str | os.PathLike[str] | None = None,
    p12_passphrase: str = "",
    cert_path: str | os.PathLike[str] | None = None,
    key_path: str | os.PathLike[str] | None = None,
    token: str | None = None,
    ca_cert_paths: Sequence[str | os.PathLike[str]] = (),
    timeout: float = DEFAULT_API_TIMEOUT_S,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` authenticated to an F5 XC tenant.

    A client certificate takes precedence over *token*: when certificate
    material is given the token is not sent.

    Parameters
    ----------
    api_url:
        Tenant API URL, e.g. ``https://tenant.console.ves.volterra.io/api``.
    p12_path, p12_passphrase:
        PKCS#12 bundle holding the client certificate and key.
    cert_path, key_path:
        PEM client certificate and key, used when no bundle is given.
    token:
        API token, sent as ``Authorization: APIToken <token>``.
    ca_cert_paths:
        Extra CA certificates to trust alongside the system store.
    timeout:
        Default request timeout in seconds.

    Raises
    ------
    MissingURL, InvalidEndpointURL
        From :func:`validate_api_url`.
    MissingAuthentication
        If neither a certificate nor a token is provided.
    CertificateError
        From :func:`build_ssl_context`.
    """
    base_url = validate_api_url(api_url)
    if p12_path is None and (cert_path is None or key_path is None) and not token:
        raise MissingAuthentication()
    context, has_identity = build_ssl_context(
        p12_path=p12_path,
        p12_passphrase=p12_passphrase,
        cert_path=cert_path,
        key_path=key_path,
        ca_cert_paths=ca_cert_paths,
    )
    headers = {"Content-Type": API_CONTENT_TYPE}
    if token and not has_identity:
        logger.debug("Adding authToken header")
        headers["Authorization"] = f"APIToken {token}"
    # Resource paths are absolute (/api/...), so only the origin is kept.
    origin = f"{base_url.scheme}://{base_url.netloc.decode('ascii')}"
    return httpx.AsyncClient(
        base_url=origin,
        headers=headers,
        verify=context,
        timeout=timeout,
    )
