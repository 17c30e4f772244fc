"""Sealing ("blindfolding") plaintext with an isolated vesctl.

This subpackage provides:

* **blindfold** -- stage inputs, run vesctl in isolation and return the
  sealed payload (:mod:`~f5xc_blindfold.seal.blindfold`).
* **find_vesctl** -- locate the vesctl executable
  (:mod:`~f5xc_blindfold.seal.locate`).
* **write_envelope / stage_plaintext** -- write vesctl input files
  (:mod:`~f5xc_blindfold.seal.staging`).
* **OutputParser / SecondLineParser** -- extract the payload from vesctl
  output (:mod:`~f5xc_blindfold.seal.output`).
"""
from __future__ import annotations

from f5xc_blindfold.seal.blindfold import (
    ENCRYPT_COMMAND,
    POLICY_DOCUMENT_PARAMETER,
    PUBLIC_KEY_PARAMETER,
    blindfold,
    blindfold_with_config,
)
from f5xc_blindfold.seal.locate import find_vesctl
from f5xc_blindfold.seal.output import DEFAULT_OUTPUT_PARSER, OutputParser, SecondLineParser
from f5xc_blindfold.seal.staging import render_envelope, stage_plaintext, write_envelope

__all__ = [
    "ENCRYPT_COMMAND",
    "POLICY_DOCUMENT_PARAMETER",
    "PUBLIC_KEY_PARAMETER",
    "blindfold",
    "blindfold_with_config",
    "find_vesctl",
    "DEFAULT_OUTPUT_PARSER",
    "OutputParser",
    "SecondLineParser",
    "render_envelope",
    "stage_plaintext",
    "write_envelope",
]
