"""Conformance: vesctl never sees ambient credentials.

Sentinel values are placed in every credential variable vesctl understands;
none of them may appear anywhere in the child's environment or argv.
"""
from __future__ import annotations

import json

import pytest

from f5xc_blindfold.isolation.environment import DECOY_SERVER_URL, DEFAULT_DECOY_PROFILE
from f5xc_blindfold.isolation.subprocess import IsolatedExecutor
from f5xc_blindfold.seal.blindfold import blindfold


def _load(record) -> tuple[list[str], dict[str, str]]:
    data = json.loads(record.read_text())
    return data["argv"], data["env"]


class TestIsolationInvariant:

    @pytest.mark.asyncio
    async def test_seal_hides_sentinels(
        self, recording_vesctl, sentinels, public_key, policy_document,
    ) -> None:
        tool, record = recording_vesctl
        await blindfold(b"secret", public_key, policy_document, vesctl=str(tool))
        argv, env = _load(record)
        for value in sentinels.values():
            assert value not in env.values()
            assert all(value not in arg for arg in argv)

    @pytest.mark.asyncio
    async def test_every_credential_source_is_decoyed(
        self, recording_vesctl, sentinels, public_key, policy_document,
    ) -> None:
        tool, record = recording_vesctl
        await blindfold(b"secret", public_key, policy_document, vesctl=str(tool))
        argv, env = _load(record)
        profile = DEFAULT_DECOY_PROFILE
        for name in profile.protected_variables:
            assert name in env
        for name in profile.protected_parameters:
            assert name in argv
        assert env["VOLT_API_URL"] == DECOY_SERVER_URL
        assert argv[argv.index("--server-urls") + 1] == DECOY_SERVER_URL

    @pytest.mark.asyncio
    async def test_no_parent_variable_inherited(
        self, recording_vesctl, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("UNRELATED_PARENT_VARIABLE", "parent-value")
        tool, record = recording_vesctl
        await IsolatedExecutor().execute(
            str(tool), ["request", "secrets", "encrypt", "/dev/null"],
            {"--public-key": "/dev/null", "--policy-document": "/dev/null"},
        )
        _, env = _load(record)
        assert "UNRELATED_PARENT_VARIABLE" not in env
        assert "parent-value" not in env.values()
