"""Shared fixtures for f5xc-blindfold conformance tests.

Provides a stand-in vesctl and a stand-in Wingman that agree on a trivial
"sealing" scheme, so that seal/unseal behaviour can be checked end to end
without F5 XC infrastructure:

* the fake vesctl prints a header line, then ``base64(MARKER + plaintext)``;
* the fake Wingman strips ``MARKER`` and answers with ``base64(plaintext)``.
"""
from __future__ import annotations

import base64
import json
import stat
import sys
import tempfile
import textwrap
from pathlib import Path

import httpx
import pytest

from f5xc_blindfold.core.types import (
    Metadata,
    PolicyDocument,
    PolicyInfo,
    PolicyRule,
    PublicKey,
)

MARKER = b"BLINDFOLD:"

# ---------------------------------------------------------------------------
# Ambient credentials that must never reach vesctl
# ---------------------------------------------------------------------------
SENTINELS = {
    "VOLT_API_P12_FILE": "/sentinel/api-creds.p12",
    "VOLT_API_CERT": "/sentinel/api.crt",
    "VOLT_API_KEY": "/sentinel/api.key",
    "VOLT_API_URL": "https://sentinel.console.ves.volterra.io/api",
    "VES_P12_PASSWORD": "sentinel-p12-password",
    "VOLTERRA_TOKEN": "sentinel-api-token",
}

_FAKE_VESCTL = """\
    import base64, json, os, sys
    argv = sys.argv[1:]
    if {record!r}:
        with open({record!r}, "w") as f:
            json.dump({{"argv": argv, "env": dict(os.environ)}}, f)
    if argv[:3] != ["request", "secrets", "encrypt"]:
        sys.stderr.write("unknown command\\n")
        sys.exit(2)
    for name in ("--public-key", "--policy-document"):
        if name not in argv:
            sys.stderr.write(name + " is required\\n")
            sys.exit(2)
    try:
        with open(argv[3], "rb") as f:
            plaintext = f.read()
    except OSError as exc:
        sys.stderr.write(str(exc) + "\\n")
        sys.exit(1)
    print("Encrypted Secret (base64 encoded):")
    print(base64.b64encode({marker!r} + plaintext).decode())
"""


def _write_tool(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def fake_vesctl(tmp_path: Path) -> Path:
    """A vesctl stand-in implementing the marker sealing scheme."""
    return _write_tool(
        tmp_path / "vesctl", _FAKE_VESCTL.format(record="", marker=MARKER),
    )


@pytest.fixture()
def recording_vesctl(tmp_path: Path) -> tuple[Path, Path]:
    """Like ``fake_vesctl`` but also records argv and environment."""
    record = tmp_path / "vesctl-record.json"
    tool = _write_tool(
        tmp_path / "vesctl-recording",
        _FAKE_VESCTL.format(record=str(record), marker=MARKER),
    )
    return tool, record


@pytest.fixture()
def tool_writer():
    return _write_tool


@pytest.fixture()
def sentinels(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key, value in SENTINELS.items():
        monkeypatch.setenv(key, value)
    return SENTINELS


@pytest.fixture()
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty directory standing in for the system temp root."""
    root = tmp_path / "temp-root"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


def unseal_handler(request: httpx.Request) -> httpx.Response:
    """Wingman stand-in for the marker sealing scheme."""
    if request.url.path == "/status":
        return httpx.Response(200, content=b"READY")
    if request.url.path != "/secret/unseal":
        return httpx.Response(404)
    document = json.loads(request.content)
    if document.get("type") != "blindfold":
        return httpx.Response(400, content=b"unsupported type")
    location = document["location"]
    if not location.startswith("string:///"):
        return httpx.Response(400, content=b"unsupported location")
    sealed = base64.b64decode(location.removeprefix("string:///"))
    if not sealed.startswith(MARKER):
        return httpx.Response(403)
    return httpx.Response(200, content=base64.b64encode(sealed.removeprefix(MARKER)))


@pytest.fixture()
def wingman_transport() -> httpx.MockTransport:
    return httpx.MockTransport(unseal_handler)


@pytest.fixture()
def public_key() -> PublicKey:
    return PublicKey(
        key_version=7,
        modulus_base64="Y29uZm9ybWFuY2U=",
        public_exponent_base64="AQAB",
        tenant="conformance-tenant",
    )


@pytest.fixture()
def policy_document() -> PolicyDocument:
    return PolicyDocument(
        metadata=Metadata(name="conformance", namespace="shared", tenant="conformance-tenant"),
        policy_id="conformance-policy",
        policy_info=PolicyInfo(
            algo="FIRST_MATCH",
            rules=[PolicyRule(action="ALLOW", client_name="conformance-client")],
        ),
    )
