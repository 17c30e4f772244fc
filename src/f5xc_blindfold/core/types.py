"""f5xc-blindfold shared domain types.

This module defines the value types and Pydantic models shared across the
package.  All public symbols are re-exported from ``f5xc_blindfold``.

Key design decisions:
* ``SealedSecret`` is a ``NewType`` over ``bytes``; its content is never
  interpreted, only transported.
* Resource models accept the F5 XC API's snake_case JSON on input and
  serialise to the camelCase layout vesctl expects in its YAML input files
  when dumped ``by_alias``.
* ``Envelope`` is a closed union of exactly two concrete envelope models.
"""
from __future__ import annotations

from typing import Any, NewType

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

SealedSecret = NewType("SealedSecret", bytes)
"""Base64 text produced by vesctl; consumable only by Wingman."""


_RESOURCE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=AliasGenerator(serialization_alias=to_camel),
)


# ---------------------------------------------------------------------------
# Common F5 XC structures
# ---------------------------------------------------------------------------

class Metadata(BaseModel):
    """Metadata associated with F5 XC resources."""

    model_config = _RESOURCE_CONFIG

    name: str | None = None
    namespace: str | None = None
    tenant: str | None = None


class MatcherType(BaseModel):
    """Matches a value against exact strings or regular expressions."""

    model_config = _RESOURCE_CONFIG

    exact_values: list[str] = Field(default_factory=list)
    regex_values: list[str] = Field(default_factory=list)
    transformers: list[str] = Field(default_factory=list)


class LabelSelectorType(BaseModel):
    """Selects clients by label expressions, similar to Kubernetes."""

    model_config = _RESOURCE_CONFIG

    expressions: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# PublicKey
# ---------------------------------------------------------------------------

class PublicKey(BaseModel):
    """An F5 XC secret-management public key for the authenticated tenant."""

    model_config = _RESOURCE_CONFIG

    key_version: int
    modulus_base64: str
    public_exponent_base64: str
    tenant: str


# ---------------------------------------------------------------------------
# PolicyDocument
# ---------------------------------------------------------------------------

class PolicyRule(BaseModel):
    """A single secret policy rule: an action and an optional client match."""

    model_config = _RESOURCE_CONFIG

    action: str
    client_name: str | None = None
    client_name_matcher: MatcherType | None = None
    client_selector: LabelSelectorType | None = None


class PolicyInfo(BaseModel):
    """The algorithm and ordered rules of a secret policy."""

    model_config = _RESOURCE_CONFIG

    algo: str
    rules: list[PolicyRule] = Field(default_factory=list)


class PolicyDocument(BaseModel):
    """The complete specification of a secret policy.

    The API returns ``name``, ``namespace`` and ``tenant`` at the top
    level of the document; they are collected into :attr:`metadata`.
    """

    model_config = _RESOURCE_CONFIG

    metadata: Metadata | None = None
    policy_id: str
    policy_info: PolicyInfo

    @model_validator(mode="before")
    @classmethod
    def _collect_metadata(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        flat = {k: data[k] for k in ("name", "namespace", "tenant") if k in data}
        if not flat:
            return data
        folded = {k: v for k, v in data.items() if k not in flat}
        folded.setdefault("metadata", flat)
        return folded


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class PublicKeyEnvelope(BaseModel):
    """Wire wrapper nesting a :class:`PublicKey` under ``data``."""

    model_config = ConfigDict(frozen=True)

    data: PublicKey


class PolicyDocumentEnvelope(BaseModel):
    """Wire wrapper nesting a :class:`PolicyDocument` under ``data``."""

    model_config = ConfigDict(frozen=True)

    data: PolicyDocument


Envelope = PublicKeyEnvelope | PolicyDocumentEnvelope
"""The only two resources F5 XC wraps in an envelope."""

EnvelopeResource = PublicKey | PolicyDocument


def envelope_for(resource: EnvelopeResource) -> Envelope:
    """Wrap *resource* in its matching envelope model.

    Raises
    ------
    TypeError
        If *resource* is neither a PublicKey nor a PolicyDocument.
    """
    if isinstance(resource, PublicKey):
        return PublicKeyEnvelope(data=resource)
    if isinstance(resource, PolicyDocument):
        return PolicyDocumentEnvelope(data=resource)
    raise TypeError(f"No envelope for {type(resource).__name__}")


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------

class ExecutionResult(BaseModel):
    """Captured output of a completed vesctl run."""

    model_config = ConfigDict(strict=True, frozen=True)

    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""
