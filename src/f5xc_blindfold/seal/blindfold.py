"""Sealing plaintext with vesctl.

:func:`blindfold` composes staging, isolated execution and output parsing
into a single "plaintext in, sealed bytes out" operation.  The staged key,
policy and plaintext files live in a private temp directory that is removed
however the call ends.
"""
from __future__ import annotations

import logging
import shutil
import tempfile

from f5xc_blindfold.core.config import SealConfig
from f5xc_blindfold.core.errors import OutputParseFailure, StagingFailure
from f5xc_blindfold.core.types import PolicyDocument, PublicKey, SealedSecret
from f5xc_blindfold.isolation.subprocess import IsolatedExecutor
from f5xc_blindfold.seal.locate import find_vesctl
from f5xc_blindfold.seal.output import DEFAULT_OUTPUT_PARSER, OutputParser
from f5xc_blindfold.seal.staging import Plaintext, stage_plaintext, write_envelope

logger = logging.getLogger(__name__)

ENCRYPT_COMMAND = ("request", "secrets", "encrypt")
PUBLIC_KEY_PARAMETER = "--public-key"
POLICY_DOCUMENT_PARAMETER = "--policy-document"


def _remove_tree(path: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Failed to remove staging directory %s: %s", path, exc)


async def blindfold(
    plaintext: Plaintext,
    public_key: PublicKey,
    policy_document: PolicyDocument,
    *,
    vesctl: str = "",
    executor: IsolatedExecutor | None = None,
    parser: OutputParser | None = None,
    timeout: float | None = None,
) -> SealedSecret:
    """Seal *plaintext* with vesctl using *public_key* and *policy_document*.

    Parameters
    ----------
    plaintext:
        The data to seal as bytes, or the path of a file holding it.
    public_key:
        Tenant public key fetched from F5 XC.
    policy_document:
        Secret policy that Wingman will enforce on unseal.
    vesctl:
        Name or path of vesctl; empty searches for ``vesctl`` on PATH.
    executor:
        Isolated executor to run vesctl with; a default one is created.
    parser:
        Output parser; defaults to :class:`~f5xc_blindfold.seal.output.SecondLineParser`.
    timeout:
        Deadline in seconds for the vesctl run.

    Returns
    -------
    SealedSecret
        The base64 sealed data printed by vesctl, or ``b""`` if vesctl
        printed no payload line.

    Raises
    ------
    ToolNotFound
        If vesctl cannot be located.
    StagingFailure
        If an input file cannot be staged.
    ToolLaunchFailure, ToolExecutionFailure, ExecutionTimeout
        From :meth:`IsolatedExecutor.execute`.
    OutputParseFailure
        If the parser rejects vesctl's output.
    """
    logger.debug("Preparing to blindfold")
    vesctl_path = find_vesctl(vesctl)
    executor = executor or IsolatedExecutor()
    parser = parser or DEFAULT_OUTPUT_PARSER

    try:
        tmp_dir = tempfile.mkdtemp()
    except OSError as exc:
        raise StagingFailure(
            f"failed to create temporary directory: {exc}",
            details={"errno": exc.errno},
        ) from exc

    try:
        public_key_file = write_envelope(public_key, tmp_dir)
        policy_document_file = write_envelope(policy_document, tmp_dir)
        plaintext_file = stage_plaintext(plaintext, tmp_dir)

        result = await executor.execute(
            vesctl_path,
            [*ENCRYPT_COMMAND, str(plaintext_file)],
            {
                PUBLIC_KEY_PARAMETER: str(public_key_file),
                POLICY_DOCUMENT_PARAMETER: str(policy_document_file),
            },
            timeout=timeout,
        )
    finally:
        _remove_tree(tmp_dir)

    try:
        sealed = parser.parse(result.stdout)
    except ValueError as exc:
        raise OutputParseFailure(
            f"failed to scan vesctl output: {exc}",
            details={"contract": parser.contract},
        ) from exc
    return SealedSecret(sealed)


async def blindfold_with_config(
    plaintext: Plaintext,
    public_key: PublicKey,
    policy_document: PolicyDocument,
    config: SealConfig,
    *,
    parser: OutputParser | None = None,
) -> SealedSecret:
    """Run :func:`blindfold` with settings taken from a :class:`SealConfig`."""
    executor = IsolatedExecutor(
        allow_protected_overrides=config.allow_protected_overrides,
        disable_core_dumps=config.disable_core_dumps,
    )
    return await blindfold(
        plaintext,
        public_key,
        policy_document,
        vesctl=config.vesctl,
        executor=executor,
        parser=parser,
        timeout=config.timeout,
    )
