"""Staging vesctl input files.

vesctl only reads its inputs from the filesystem: the public key and policy
document as YAML envelopes, and the plaintext as a plain file.  Every file is
created inside a caller-owned directory; removing that directory is the
caller's responsibility.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic_core import PydanticSerializationError

from f5xc_blindfold.core.errors import EnvelopeSerializationFailure, StagingFailure
from f5xc_blindfold.core.types import EnvelopeResource, envelope_for

logger = logging.getLogger(__name__)

STAGING_PREFIX = "blindfold"

Plaintext = bytes | bytearray | memoryview | str | os.PathLike[str]


def render_envelope(resource: EnvelopeResource) -> bytes:
    """Serialise *resource* as the YAML envelope vesctl expects.

    Raises
    ------
    EnvelopeSerializationFailure
        If the resource cannot be wrapped or represented as YAML.
    """
    try:
        envelope = envelope_for(resource)
        document = envelope.model_dump(mode="json", by_alias=True, exclude_none=True)
        return yaml.safe_dump(document, sort_keys=False).encode("utf-8")
    except (TypeError, PydanticSerializationError, yaml.YAMLError) as exc:
        raise EnvelopeSerializationFailure(
            f"failed to marshal {type(resource).__name__} to YAML: {exc}",
            details={"resource": type(resource).__name__},
        ) from exc


def _write_temp_file(directory: str | os.PathLike[str], data: bytes | bytearray | memoryview) -> Path:
    try:
        fd, name = tempfile.mkstemp(prefix=STAGING_PREFIX, dir=directory)
    except OSError as exc:
        raise StagingFailure(
            f"failed to create temp file: {exc}",
            details={"directory": str(directory), "errno": exc.errno},
        ) from exc
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise StagingFailure(
            f"failed to write data to file: {exc}",
            details={"path": name, "errno": exc.errno},
        ) from exc
    return Path(name)


def write_envelope(resource: EnvelopeResource, directory: str | os.PathLike[str]) -> Path:
    """Write *resource* as a YAML envelope to a new file in *directory*.

    Returns
    -------
    Path
        The staged file.

    Raises
    ------
    EnvelopeSerializationFailure
        If serialisation fails (a data problem).
    StagingFailure
        If the file cannot be created or written (an environment problem).
    """
    data = render_envelope(resource)
    path = _write_temp_file(directory, data)
    logger.debug("Staged %s envelope at %s", type(resource).__name__, path)
    return path


def stage_plaintext(plaintext: Plaintext, directory: str | os.PathLike[str]) -> Path:
    """Make *plaintext* available as a file.

    Bytes-like input is written to a new file in *directory*.  A path is
    returned unchanged and is not checked for existence; vesctl reports a
    missing file itself.
    """
    if isinstance(plaintext, (str, os.PathLike)):
        return Path(plaintext)
    path = _write_temp_file(directory, plaintext)
    logger.debug("Staged plaintext at %s", path)
    return path
