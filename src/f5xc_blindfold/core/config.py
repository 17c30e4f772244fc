"""f5xc-blindfold configuration.

Defines the validated configuration models consumed by the sealing and
unsealing subsystems.  All fields carry defaults so that a bare
``SealConfig()`` or ``WingmanConfig()`` is enough for a sidecar deployment.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

#: Default Wingman base URL when deployed as a sidecar on vk8s.
DEFAULT_WINGMAN_URL = "http://localhost:8070"

#: Default name used when searching for vesctl.
VESCTL_EXECUTABLE = "vesctl"

# Environment variables understood by :meth:`WingmanConfig.from_env`.
ENV_WINGMAN_URL = "UNSEAL_WINGMAN_URL"
ENV_LOG_LEVEL = "UNSEAL_LOG_LEVEL"
ENV_POLL_INTERVAL = "UNSEAL_POLL_INTERVAL"
ENV_READY_TIMEOUT = "UNSEAL_READY_TIMEOUT"
ENV_REQUEST_TIMEOUT = "UNSEAL_REQUEST_TIMEOUT"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Level names accepted in addition to the canonical ones.
_LEVEL_ALIASES = {"WARN": "WARNING"}


class SealConfig(BaseModel):
    """Configuration for sealing with an isolated vesctl."""

    model_config = ConfigDict(strict=True, frozen=True)

    vesctl: str = Field(
        default=VESCTL_EXECUTABLE,
        description=(
            "Name to search for on PATH, or an explicit path to vesctl."
        ),
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for a single vesctl run.",
    )
    allow_protected_overrides: bool = Field(
        default=False,
        description=(
            "When True, caller parameters may replace decoy credential "
            "parameters (a warning is logged for each one)."
        ),
    )
    disable_core_dumps: bool = Field(
        default=True,
        description="Disable core dumps in the vesctl child process.",
    )


class WingmanConfig(BaseModel):
    """Configuration for talking to a Wingman sidecar."""

    model_config = ConfigDict(strict=True, frozen=True)

    url: str = Field(
        default=DEFAULT_WINGMAN_URL,
        description="Base URL of the Wingman REST API.",
    )
    poll_interval: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to sleep between readiness probes.",
    )
    ready_timeout: float | None = Field(
        default=None,
        gt=0,
        description=(
            "Seconds to wait for readiness; None waits until cancelled."
        ),
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for a single unseal request.",
    )
    log_level: LogLevel = Field(
        default="WARNING",
        description="Logging level used by the unseal CLI.",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> WingmanConfig:
        """Build a config from ``UNSEAL_*`` environment variables.

        Unset or empty variables fall back to the defaults.  Values are
        validated in lax mode so numeric strings are accepted.  An
        unrecognised log level is logged and replaced by the default.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field_name, var in (
            ("url", ENV_WINGMAN_URL),
            ("poll_interval", ENV_POLL_INTERVAL),
            ("ready_timeout", ENV_READY_TIMEOUT),
            ("request_timeout", ENV_REQUEST_TIMEOUT),
        ):
            raw = environ.get(var, "").strip()
            if raw:
                values[field_name] = raw

        raw_level = environ.get(ENV_LOG_LEVEL, "").strip()
        if raw_level:
            level = _LEVEL_ALIASES.get(raw_level.upper(), raw_level.upper())
            if level in get_args(LogLevel):
                values["log_level"] = level
            else:
                logger.warning(
                    "Failed to parse requested log level %r from %s, using %s",
                    raw_level, ENV_LOG_LEVEL, cls.model_fields["log_level"].default,
                )
        return cls.model_validate(values, strict=False)
