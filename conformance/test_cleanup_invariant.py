"""Conformance: no call leaves files behind in the temp root.

Holds for successful seals, failed seals, timeouts and cancellation.
"""
from __future__ import annotations

import asyncio
import os

import pytest

from f5xc_blindfold.core.errors import ExecutionTimeout, ToolExecutionFailure
from f5xc_blindfold.seal.blindfold import blindfold


class TestCleanupInvariant:

    @pytest.mark.asyncio
    async def test_after_success(
        self, temp_root, fake_vesctl, public_key, policy_document,
    ) -> None:
        await blindfold(b"secret", public_key, policy_document, vesctl=str(fake_vesctl))
        assert os.listdir(temp_root) == []

    @pytest.mark.asyncio
    async def test_after_tool_failure(
        self, temp_root, tmp_path, fake_vesctl, public_key, policy_document,
    ) -> None:
        with pytest.raises(ToolExecutionFailure):
            await blindfold(
                tmp_path / "no-such-plaintext", public_key, policy_document,
                vesctl=str(fake_vesctl),
            )
        assert os.listdir(temp_root) == []

    @pytest.mark.asyncio
    async def test_after_timeout(
        self, temp_root, tmp_path, tool_writer, public_key, policy_document,
    ) -> None:
        tool = tool_writer(tmp_path / "hung-vesctl", "import time\ntime.sleep(60)\n")
        with pytest.raises(ExecutionTimeout):
            await blindfold(
                b"secret", public_key, policy_document, vesctl=str(tool), timeout=0.3,
            )
        assert os.listdir(temp_root) == []

    @pytest.mark.asyncio
    async def test_after_cancellation(
        self, temp_root, tmp_path, tool_writer, public_key, policy_document,
    ) -> None:
        started = tmp_path / "started"
        tool = tool_writer(tmp_path / "hung-vesctl", f"""\
            import time
            open({str(started)!r}, "w").close()
            time.sleep(60)
            """)
        task = asyncio.create_task(
            blindfold(b"secret", public_key, policy_document, vesctl=str(tool)),
        )
        for _ in range(200):
            if started.exists():
                break
            await asyncio.sleep(0.05)
        assert started.exists()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert os.listdir(temp_root) == []
