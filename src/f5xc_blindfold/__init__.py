"""f5xc-blindfold -- sealing and unsealing secrets for F5 Distributed Cloud.

Plaintext is sealed ("blindfolded") offline with vesctl against a tenant
public key and a secret policy, and only Wingman can unseal it for a
workload that the policy admits.

Subsystems
----------
* Sealing with an isolated vesctl (:mod:`f5xc_blindfold.seal`)
* Decoy execution environment (:mod:`f5xc_blindfold.isolation`)
* Wingman sidecar client (:mod:`f5xc_blindfold.wingman`)
* F5 XC API access for keys and policies (:mod:`f5xc_blindfold.api`)
"""
from __future__ import annotations

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# F5 XC API
# ---------------------------------------------------------------------------
from f5xc_blindfold.api import (
    create_client,
    get_public_key,
    get_secret_policy_document,
)
from f5xc_blindfold.core.config import SealConfig, WingmanConfig

# ---------------------------------------------------------------------------
# Core types, errors, config
# ---------------------------------------------------------------------------
from f5xc_blindfold.core.errors import (
    APIError,
    BlindfoldError,
    ConfigurationError,
    ExecutionTimeout,
    PolicyDenied,
    ServiceNotReady,
    SealError,
    ToolExecutionFailure,
    ToolLaunchFailure,
    ToolNotFound,
    UnexpectedStatus,
    UnsealError,
    WingmanNotReady,
    WingmanTransportError,
)
from f5xc_blindfold.core.types import (
    ExecutionResult,
    Metadata,
    PolicyDocument,
    PolicyDocumentEnvelope,
    PublicKey,
    PublicKeyEnvelope,
    SealedSecret,
)

# ---------------------------------------------------------------------------
# Execution isolation
# ---------------------------------------------------------------------------
from f5xc_blindfold.isolation import DecoyProfile, IsolatedExecutor, SecureMemory

# ---------------------------------------------------------------------------
# Sealing
# ---------------------------------------------------------------------------
from f5xc_blindfold.seal import (
    OutputParser,
    SecondLineParser,
    blindfold,
    blindfold_with_config,
    find_vesctl,
)

# ---------------------------------------------------------------------------
# Wingman
# ---------------------------------------------------------------------------
from f5xc_blindfold.wingman import (
    default_unseal,
    default_unseal_encoded,
    default_wait_for_ready,
    unseal,
    unseal_encoded,
    wait_for_ready,
)

__all__ = [
    # Meta
    "__version__",
    # Core types
    "SealedSecret",
    "Metadata",
    "PublicKey",
    "PolicyDocument",
    "PublicKeyEnvelope",
    "PolicyDocumentEnvelope",
    "ExecutionResult",
    # Config
    "SealConfig",
    "WingmanConfig",
    # Error hierarchy
    "BlindfoldError",
    "SealError",
    "UnsealError",
    "APIError",
    "ConfigurationError",
    "ToolNotFound",
    "ToolLaunchFailure",
    "ToolExecutionFailure",
    "ExecutionTimeout",
    "PolicyDenied",
    "ServiceNotReady",
    "UnexpectedStatus",
    "WingmanTransportError",
    "WingmanNotReady",
    # Sealing
    "blindfold",
    "blindfold_with_config",
    "find_vesctl",
    "OutputParser",
    "SecondLineParser",
    # Isolation
    "DecoyProfile",
    "IsolatedExecutor",
    "SecureMemory",
    # Wingman
    "wait_for_ready",
    "default_wait_for_ready",
    "unseal",
    "unseal_encoded",
    "default_unseal",
    "default_unseal_encoded",
    # API
    "create_client",
    "get_public_key",
    "get_secret_policy_document",
]
