"""f5xc-blindfold error hierarchy.

Every failure the library can report is a concrete exception class so that
callers can tell "vesctl ran and rejected the input" apart from "vesctl could
not be started", and "Wingman refused by policy" apart from "Wingman is
still warming up".

Hierarchy
---------
::

    BlindfoldError
    +-- SealError             (BF-E1xx)
    +-- UnsealError           (BF-E2xx)
    +-- APIError              (BF-E3xx)
    +-- ConfigurationError    (BF-E4xx)

Usage
-----
Raise concrete subclasses directly::

    raise ToolNotFound(details={"name": "vesctl"})

Catch by category::

    try:
        ...
    except UnsealError:
        # handles PolicyDenied, ServiceNotReady, UnexpectedStatus, etc.
        ...

Messages and details MUST NOT carry plaintext or sealed values.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class BlindfoldError(Exception):
    """Base exception for all f5xc-blindfold errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"BF-E100"``.
    message : str
        Human-readable description (MUST NOT contain secret values).
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "BF-E000"
    message: str = "Unknown blindfold error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a structured mapping for logs or APIs."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class SealError(BlindfoldError):
    """BF-E1xx -- Failures while sealing plaintext with vesctl."""

    code = "BF-E1XX"


class UnsealError(BlindfoldError):
    """BF-E2xx -- Failures while talking to the Wingman sidecar."""

    code = "BF-E2XX"


class APIError(BlindfoldError):
    """BF-E3xx -- Failures while calling the F5 Distributed Cloud API."""

    code = "BF-E3XX"


class ConfigurationError(BlindfoldError):
    """BF-E4xx -- Invalid endpoints, credentials or client settings."""

    code = "BF-E4XX"


# ===================================================================
# BF-E1xx  Sealing
# ===================================================================

class ToolNotFound(SealError):
    """BF-E100 -- The vesctl executable could not be located."""

    code = "BF-E100"
    message = "vesctl executable could not be found"
    resolution = (
        "Install vesctl on PATH or pass an explicit filename or path."
    )


class ToolLaunchFailure(SealError):
    """BF-E101 -- vesctl could not be started by the operating system."""

    code = "BF-E101"
    message = "vesctl could not be started"
    resolution = "Check that the executable exists and is executable."


class ToolExecutionFailure(SealError):
    """BF-E102 -- vesctl ran but exited non-zero or was killed."""

    code = "BF-E102"
    message = "failed to execute vesctl"
    resolution = (
        "Inspect the captured stderr; vesctl rejected its input or "
        "could not complete the request."
    )

    @property
    def exit_code(self) -> int | None:
        return self.details.get("exit_code")


class StagingFailure(SealError):
    """BF-E103 -- A staging file could not be written."""

    code = "BF-E103"
    message = "failed to stage vesctl input files"
    resolution = "Check free space and permissions of the temp directory."


class EnvelopeSerializationFailure(StagingFailure):
    """BF-E104 -- A resource could not be serialised into its envelope."""

    code = "BF-E104"
    message = "failed to serialise resource envelope"
    resolution = (
        "The PublicKey or PolicyDocument holds data that cannot be "
        "represented as YAML; verify its source."
    )


class ExecutionTimeout(SealError):
    """BF-E105 -- vesctl exceeded its deadline and was killed."""

    code = "BF-E105"
    message = "vesctl execution timed out"
    resolution = "Increase the timeout or check whether vesctl is hanging."


class ProtectedParameterOverride(SealError):
    """BF-E106 -- A caller tried to replace a decoy credential parameter."""

    code = "BF-E106"
    message = "refusing to override a protected vesctl parameter"
    resolution = (
        "Remove credential parameters from the call, or enable "
        "allow_protected_overrides if the override is intended."
    )


class OutputParseFailure(SealError):
    """BF-E107 -- vesctl output could not be read by the output parser."""

    code = "BF-E107"
    message = "failed to parse vesctl output"
    resolution = "The vesctl output format may have changed."


# ===================================================================
# BF-E2xx  Unsealing
# ===================================================================

class PolicyDenied(UnsealError):
    """BF-E200 -- Wingman refused the request under the sealing policy."""

    code = "BF-E200"
    message = "denied by security policy"
    resolution = (
        "The workload is not permitted to unseal this secret; reseal "
        "it with a policy that admits this client."
    )


class ServiceNotReady(UnsealError):
    """BF-E201 -- Wingman answered 503 and is not ready."""

    code = "BF-E201"
    message = "wingman is not ready"
    resolution = "Wait for Wingman readiness before unsealing."

    @property
    def diagnostic(self) -> str:
        return self.details.get("body", "")


class UnexpectedStatus(UnsealError):
    """BF-E202 -- Wingman answered with a status other than 200, 403 or 503."""

    code = "BF-E202"
    message = "wingman returned an unexpected status code"
    resolution = "Inspect the returned body for Wingman's diagnostic."

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")

    @property
    def body(self) -> str:
        return self.details.get("body", "")


class WingmanTransportError(UnsealError):
    """BF-E203 -- The request to Wingman failed below the HTTP layer."""

    code = "BF-E203"
    message = "failure during wingman request"
    resolution = "Check the Wingman URL and that the sidecar is reachable."


class MalformedUnsealResponse(UnsealError):
    """BF-E204 -- Wingman answered 200 but the body is not base64."""

    code = "BF-E204"
    message = "failed to decode wingman response body"
    resolution = "Verify the endpoint is a Wingman unseal endpoint."


class WingmanNotReady(UnsealError):
    """BF-E205 -- Wingman did not report READY before the deadline."""

    code = "BF-E205"
    message = "wingman did not become ready before the deadline"
    resolution = "Increase the readiness timeout or check the sidecar logs."


# ===================================================================
# BF-E3xx  F5 Distributed Cloud API
# ===================================================================

class Unauthorized(APIError):
    """BF-E300 -- The API call carried no usable authentication."""

    code = "BF-E300"
    message = "authentication is required"
    resolution = "Provide a client certificate or API token."


class Forbidden(APIError):
    """BF-E301 -- The authenticated identity may not reach the endpoint."""

    code = "BF-E301"
    message = "access to endpoint is denied"
    resolution = "Grant the identity access to secret management APIs."


class UnexpectedAPIStatus(APIError):
    """BF-E302 -- The API answered with an unexpected status code."""

    code = "BF-E302"
    message = "endpoint returned an unexpected status code"

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")


class APITransportError(APIError):
    """BF-E303 -- The API request failed below the HTTP layer."""

    code = "BF-E303"
    message = "failure making API call"


class MalformedAPIResponse(APIError):
    """BF-E304 -- The API response is not a valid envelope."""

    code = "BF-E304"
    message = "failed to parse API response envelope"


# ===================================================================
# BF-E4xx  Configuration
# ===================================================================

class InvalidEndpointURL(ConfigurationError):
    """BF-E400 -- An endpoint URL could not be parsed or has a bad scheme."""

    code = "BF-E400"
    message = "failed to parse endpoint URL"
    resolution = "Provide an absolute http(s) URL including a host."


class MissingURL(ConfigurationError):
    """BF-E401 -- No API URL was provided when building a client."""

    code = "BF-E401"
    message = "an API URL must be provided"


class MissingAuthentication(ConfigurationError):
    """BF-E402 -- Neither a client certificate nor a token was provided."""

    code = "BF-E402"
    message = "a client certificate or API token must be provided"


class CertificateError(ConfigurationError):
    """BF-E403 -- A certificate, key or CA bundle could not be loaded."""

    code = "BF-E403"
    message = "failed to load certificate material"
    resolution = "Check the file paths and the PKCS#12 passphrase."
