"""Isolated vesctl execution.

This module implements the :class:`IsolatedExecutor` which runs vesctl in a
child process whose command line and environment are rebuilt from the decoy
context in :mod:`f5xc_blindfold.isolation.environment`.

Key guarantees:
1. Every credential parameter and variable vesctl knows is decoyed.
2. The child environment is constructed explicitly and inherits nothing.
3. The child gets no stdin and cannot write a core dump.
4. On timeout or cancellation the child is killed before control returns.
5. The decoy file is removed on every exit path.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from collections.abc import Mapping

from f5xc_blindfold.core.errors import (
    ExecutionTimeout,
    ToolExecutionFailure,
    ToolLaunchFailure,
)
from f5xc_blindfold.core.types import ExecutionResult
from f5xc_blindfold.isolation.environment import (
    DEFAULT_DECOY_PROFILE,
    DecoyProfile,
    build_arguments,
    decoy_context,
    merge_parameters,
)

logger = logging.getLogger(__name__)

# Time allowed for a killed child to be reaped.
KILL_WAIT_S = 1.0


def _preexec_fn(disable_core_dumps: bool = True) -> None:
    """Pre-exec function called in the child process before ``exec()``.

    * Disables core dumps via ``setrlimit(RLIMIT_CORE, 0)``.
    * On Linux, sets ``PR_SET_DUMPABLE = 0`` via ``prctl``.
    """
    if not disable_core_dumps:
        return
    try:
        import resource

        resource.setrlimit(resource.RLIMIT_CORE, (0, 0))
    except (ImportError, ValueError, OSError):
        pass

    # Linux-specific: prctl(PR_SET_DUMPABLE, 0)
    if sys.platform.startswith("linux"):
        try:
            import ctypes

            libc = ctypes.CDLL("libc.so.6", use_errno=True)
            PR_SET_DUMPABLE = 4  # noqa: N806
            libc.prctl(PR_SET_DUMPABLE, 0, 0, 0, 0)
        except (OSError, AttributeError):
            pass


class IsolatedExecutor:
    """Execute vesctl with every credential source replaced by a decoy.

    Usage::

        executor = IsolatedExecutor()
        result = await executor.execute(
            "/usr/local/bin/vesctl",
            ["request", "secrets", "encrypt", "/tmp/plain"],
            {"--public-key": "/tmp/key.yaml"},
            timeout=30,
        )
        # result.exit_code, result.stdout, result.stderr

    Parameters
    ----------
    profile:
        The decoy table; defaults to :data:`DEFAULT_DECOY_PROFILE`.
    allow_protected_overrides:
        Let caller parameters replace decoy credential parameters.
    disable_core_dumps:
        Disable core dumps in the child.
    """

    def __init__(
        self,
        profile: DecoyProfile = DEFAULT_DECOY_PROFILE,
        *,
        allow_protected_overrides: bool = False,
        disable_core_dumps: bool = True,
    ) -> None:
        self._profile = profile
        self._allow_protected_overrides = allow_protected_overrides
        self._disable_core_dumps = disable_core_dumps

    @property
    def profile(self) -> DecoyProfile:
        return self._profile

    async def execute(
        self,
        executable: str,
        args: list[str],
        params: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
        combine_output: bool = False,
    ) -> ExecutionResult:
        """Run *executable* with *args* plus decoy and caller parameters.

        Parameters
        ----------
        executable:
            Path to vesctl.
        args:
            Positional arguments, e.g. ``["request", "secrets", "encrypt", path]``.
        params:
            Extra ``--name value`` parameters merged after the decoys.
        timeout:
            Deadline in seconds; ``None`` waits until the task is cancelled.
        combine_output:
            Fold stderr into stdout.

        Returns
        -------
        ExecutionResult
            Exit code and captured output of a successful run.

        Raises
        ------
        ProtectedParameterOverride
            If *params* replaces a decoy parameter and that is not allowed.
        ToolLaunchFailure
            If the process cannot be started.
        ToolExecutionFailure
            If the process exits non-zero or is killed by a signal.
        ExecutionTimeout
            If the process exceeds *timeout*.
        """
        with decoy_context(self._profile) as context:
            parameters = merge_parameters(
                context.parameters(),
                params,
                protected=self._profile.protected_parameters,
                allow_protected_overrides=self._allow_protected_overrides,
            )
            final_arguments = build_arguments(args, parameters)
            logger.debug(
                "About to execute vesctl %s with %d arguments",
                executable, len(final_arguments),
            )
            result = await self._spawn_and_wait(
                [executable, *final_arguments],
                env=context.environment(),
                timeout=timeout,
                combine_output=combine_output,
            )

        if result.exit_code != 0:
            raise ToolExecutionFailure(
                f"vesctl exited with status {result.exit_code}",
                details={
                    "executable": executable,
                    "exit_code": result.exit_code,
                    "stderr": result.stderr.decode("utf-8", errors="replace"),
                },
            )
        return result

    async def _spawn_and_wait(
        self,
        command: list[str],
        env: dict[str, str],
        timeout: float | None,
        combine_output: bool,
    ) -> ExecutionResult:
        """Spawn the subprocess and wait for completion, timeout or cancellation."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT if combine_output else asyncio.subprocess.PIPE,
                close_fds=True,
                preexec_fn=lambda: _preexec_fn(self._disable_core_dumps),
            )
        except OSError as exc:
            raise ToolLaunchFailure(
                f"failed to start vesctl: {exc}",
                details={"executable": command[0], "errno": exc.errno},
            ) from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(),
                timeout=timeout,
            )
        except TimeoutError as exc:
            await self._kill_process(proc)
            raise ExecutionTimeout(
                f"vesctl exceeded timeout of {timeout}s",
                details={"timeout_ms": int((timeout or 0) * 1000)},
            ) from exc
        except asyncio.CancelledError:
            logger.debug("vesctl execution cancelled, killing pid %s", proc.pid)
            await self._kill_process(proc)
            raise

        exit_code = proc.returncode if proc.returncode is not None else -1
        logger.debug("vesctl exited with status %d", exit_code)
        return ExecutionResult(
            exit_code=exit_code,
            stdout=stdout_bytes or b"",
            stderr=stderr_bytes or b"",
        )

    @staticmethod
    async def _kill_process(proc: asyncio.subprocess.Process) -> None:
        """Send SIGKILL and reap the child."""
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(proc.wait(), timeout=KILL_WAIT_S)
