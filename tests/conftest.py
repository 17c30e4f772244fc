"""Shared fixtures for f5xc-blindfold unit tests.

Stand-in vesctl executables are small Python scripts written into the test's
temporary directory.  Each records its argv and environment to a JSON file so
tests can inspect exactly what the child process received.
"""
from __future__ import annotations

import json
import stat
import sys
import tempfile
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from f5xc_blindfold.core.types import (
    LabelSelectorType,
    Metadata,
    PolicyDocument,
    PolicyInfo,
    PolicyRule,
    PublicKey,
)

SEALED_PAYLOAD = "c2VhbGVkLXBheWxvYWQ="

# Sentinel credentials placed in the parent environment; no child may see them.
AMBIENT_CREDENTIALS = {
    "VOLT_API_P12_FILE": "/home/user/.ves/real.p12",
    "VOLT_API_CERT": "/home/user/.ves/real.crt",
    "VOLT_API_KEY": "/home/user/.ves/real.key",
    "VOLT_API_URL": "https://acme.console.ves.volterra.io/api",
    "VES_P12_PASSWORD": "ambient-p12-password",
    "VOLTERRA_TOKEN": "ambient-api-token",
    "BLINDFOLD_TEST_SENTINEL": "must-not-leak",
}


def write_tool(path: Path, body: str) -> Path:
    """Write an executable Python script to *path*."""
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def recording_tool_body(record: Path, stdout: str, exit_code: int = 0, stderr: str = "") -> str:
    return f"""\
        import json, os, sys
        with open({str(record)!r}, "w") as f:
            json.dump({{"argv": sys.argv[1:], "env": dict(os.environ)}}, f)
        sys.stdout.write({stdout!r})
        sys.stderr.write({stderr!r})
        sys.exit({exit_code})
        """


class ToolRecord:
    """Reads back what a recording tool saw."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any]:
        return json.loads(self.path.read_text())

    @property
    def argv(self) -> list[str]:
        return self.load()["argv"]

    @property
    def env(self) -> dict[str, str]:
        return self.load()["env"]

    def param(self, name: str) -> str:
        argv = self.argv
        return argv[argv.index(name) + 1]


@pytest.fixture()
def recording_tool(tmp_path: Path) -> Callable[..., tuple[Path, ToolRecord]]:
    """Factory for stand-in vesctl executables that record their input."""
    counter = iter(range(1000))

    def factory(
        stdout: str = f"Encrypted Secret (base64 encoded):\n{SEALED_PAYLOAD}\n",
        exit_code: int = 0,
        stderr: str = "",
    ) -> tuple[Path, ToolRecord]:
        n = next(counter)
        record = tmp_path / f"record-{n}.json"
        tool = write_tool(
            tmp_path / f"vesctl-{n}",
            recording_tool_body(record, stdout, exit_code, stderr),
        )
        return tool, ToolRecord(record)

    return factory


@pytest.fixture()
def ambient_credentials(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key, value in AMBIENT_CREDENTIALS.items():
        monkeypatch.setenv(key, value)
    return AMBIENT_CREDENTIALS


@pytest.fixture()
def private_tempdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect :mod:`tempfile` into an empty directory owned by the test."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture()
def public_key() -> PublicKey:
    return PublicKey(
        key_version=3,
        modulus_base64="bW9kdWx1cw==",
        public_exponent_base64="AQAB",
        tenant="acme-abcdefgh",
    )


@pytest.fixture()
def policy_document() -> PolicyDocument:
    return PolicyDocument(
        metadata=Metadata(name="allow-app", namespace="shared", tenant="acme-abcdefgh"),
        policy_id="4f1c0a4e-policy",
        policy_info=PolicyInfo(
            algo="FIRST_MATCH",
            rules=[
                PolicyRule(
                    action="ALLOW",
                    client_selector=LabelSelectorType(expressions=["app in (web)"]),
                ),
            ],
        ),
    )


@pytest.fixture()
def sealed_payload() -> str:
    return SEALED_PAYLOAD


@pytest.fixture()
def script_writer() -> Callable[[Path, str], Path]:
    return write_tool
