"""Execution isolation for vesctl.

This subpackage runs vesctl so that it cannot reach the F5 XC API with
credentials found in the calling process.  It provides:

* **IsolatedExecutor** -- async subprocess execution with a decoy command
  line and environment, timeout enforcement and kill-on-cancel.
* **DecoyProfile / decoy_context** -- the immutable table of credential
  sources vesctl recognises and the per-run decoy values replacing them.
* **SecureMemory** -- in-place wiping of plaintext buffers.

The core guarantee is:

    vesctl never sees a credential, token or server URL from the calling
    process; everything credential-shaped it receives is a decoy.
"""
from __future__ import annotations

from f5xc_blindfold.isolation.environment import (
    DECOY_SERVER_URL,
    DEFAULT_DECOY_PROFILE,
    RANDOM_STRING_CHARS,
    DecoyProfile,
    IsolatedExecutionContext,
    build_arguments,
    decoy_context,
    merge_parameters,
    random_string,
)
from f5xc_blindfold.isolation.memory import SecureMemory, wipe
from f5xc_blindfold.isolation.subprocess import IsolatedExecutor

__all__ = [
    # Subprocess execution
    "IsolatedExecutor",
    # Decoy environment
    "DECOY_SERVER_URL",
    "DEFAULT_DECOY_PROFILE",
    "RANDOM_STRING_CHARS",
    "DecoyProfile",
    "IsolatedExecutionContext",
    "build_arguments",
    "decoy_context",
    "merge_parameters",
    "random_string",
    # Secure memory
    "SecureMemory",
    "wipe",
]
