"""Decoy execution environment for vesctl.

vesctl happily makes live API calls using whatever credentials it can find
on its command line, in its config file or in ``VES_*``, ``VOLT_API_*`` and
``VOLTERRA_TOKEN`` variables.  Sealing is an offline operation, so every one
of those sources is replaced by a decoy:

1. File-sourcing parameters and variables point at one empty temp file.
2. Server URLs point at an RFC 2606 ``.invalid`` host that cannot resolve.
3. Password and token variables get a fresh random string per run.
4. The child environment is built explicitly; nothing is inherited from the
   parent process.

The decoy table is the immutable :data:`DEFAULT_DECOY_PROFILE`; each run gets
its own :class:`IsolatedExecutionContext` from :func:`decoy_context`.
"""
from __future__ import annotations

import contextlib
import logging
import os
import secrets
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from f5xc_blindfold.core.errors import ProtectedParameterOverride, StagingFailure

logger = logging.getLogger(__name__)

#: Host under the reserved ``.invalid`` TLD; lookups always fail.
DECOY_SERVER_URL = "https://f5xc.invalid/api"

# Source alphabet for decoy tokens.
RANDOM_STRING_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ012345689_"

DECOY_TOKEN_LENGTH = 16


def random_string(n: int) -> str:
    """Return *n* characters drawn from :data:`RANDOM_STRING_CHARS`."""
    return "".join(secrets.choice(RANDOM_STRING_CHARS) for _ in range(n))


@dataclass(frozen=True, slots=True)
class DecoyProfile:
    """Every credential source vesctl recognises, and how to decoy it.

    Attributes
    ----------
    file_parameters:
        Command-line parameters that read credentials or config from a file.
    url_parameters:
        Command-line parameters that select the API server.
    file_variables:
        Environment variables naming credential files.
    url_variables:
        Environment variables naming the API server.
    token_variables:
        Environment variables holding passwords or API tokens.
    server_url:
        Unreachable URL substituted for every server setting.
    token_length:
        Length of each random decoy token.
    """

    file_parameters: tuple[str, ...] = ("--p12-bundle", "--cert", "--key", "--config")
    url_parameters: tuple[str, ...] = ("--server-urls",)
    file_variables: tuple[str, ...] = ("VOLT_API_P12_FILE", "VOLT_API_CERT", "VOLT_API_KEY")
    url_variables: tuple[str, ...] = ("VOLT_API_URL",)
    token_variables: tuple[str, ...] = ("VES_P12_PASSWORD", "VOLTERRA_TOKEN")
    server_url: str = DECOY_SERVER_URL
    token_length: int = DECOY_TOKEN_LENGTH

    @property
    def protected_parameters(self) -> frozenset[str]:
        """Parameter names a caller may not override by default."""
        return frozenset(self.file_parameters + self.url_parameters)

    @property
    def protected_variables(self) -> frozenset[str]:
        """Every environment variable the profile shadows."""
        return frozenset(
            self.file_variables + self.url_variables + self.token_variables,
        )


DEFAULT_DECOY_PROFILE = DecoyProfile()


@dataclass(frozen=True, slots=True)
class IsolatedExecutionContext:
    """The decoy values for a single vesctl run.

    Attributes
    ----------
    decoy_file:
        Path of the empty file standing in for every credential file.
    server_url:
        Unreachable server URL.
    tokens:
        Random value per token variable, fresh for this run.
    profile:
        The profile the context was built from.
    """

    decoy_file: str
    server_url: str
    tokens: Mapping[str, str]
    profile: DecoyProfile = field(default=DEFAULT_DECOY_PROFILE)

    def parameters(self) -> dict[str, str]:
        """Return the baseline decoy command-line parameters."""
        params = dict.fromkeys(self.profile.file_parameters, self.decoy_file)
        params.update(dict.fromkeys(self.profile.url_parameters, self.server_url))
        return params

    def environment(self) -> dict[str, str]:
        """Return the complete child environment.

        Only decoy variables are present; no parent variable is inherited.
        """
        env = dict.fromkeys(self.profile.file_variables, self.decoy_file)
        env.update(dict.fromkeys(self.profile.url_variables, self.server_url))
        env.update(self.tokens)
        return env


@contextlib.contextmanager
def decoy_context(
    profile: DecoyProfile = DEFAULT_DECOY_PROFILE,
) -> Iterator[IsolatedExecutionContext]:
    """Create the decoy file and tokens for one run, removing the file on exit.

    Raises
    ------
    StagingFailure
        If the empty decoy file cannot be created.
    """
    try:
        fd, decoy_file = tempfile.mkstemp(prefix="vesctl")
    except OSError as exc:
        raise StagingFailure(
            f"failed to create empty decoy file: {exc}",
            details={"errno": exc.errno},
        ) from exc
    os.close(fd)
    try:
        yield IsolatedExecutionContext(
            decoy_file=decoy_file,
            server_url=profile.server_url,
            tokens={
                var: random_string(profile.token_length)
                for var in profile.token_variables
            },
            profile=profile,
        )
    finally:
        try:
            os.remove(decoy_file)
        except OSError as exc:
            logger.warning("Failed to remove decoy file %s: %s", decoy_file, exc)


def merge_parameters(
    baseline: Mapping[str, str],
    params: Mapping[str, str] | None,
    *,
    protected: frozenset[str],
    allow_protected_overrides: bool = False,
) -> dict[str, str]:
    """Merge caller *params* over the decoy *baseline*.

    Parameters
    ----------
    baseline:
        Decoy parameters from :meth:`IsolatedExecutionContext.parameters`.
    params:
        Caller parameters such as ``--public-key``.
    protected:
        Keys the caller may not replace.
    allow_protected_overrides:
        Permit replacing protected keys, logging a warning for each.

    Raises
    ------
    ProtectedParameterOverride
        If *params* names a protected key and overrides are not allowed.
    """
    merged = dict(baseline)
    for key, value in (params or {}).items():
        if key in protected:
            if not allow_protected_overrides:
                raise ProtectedParameterOverride(
                    f"parameter {key!r} is reserved for the decoy context",
                    details={"parameter": key},
                )
            logger.warning("Caller is overriding protected vesctl parameter %s", key)
        merged[key] = value
    return merged


def build_arguments(args: list[str], params: Mapping[str, str]) -> list[str]:
    """Append ``key value`` pairs from *params* to a copy of *args*."""
    final = list(args)
    for key, value in params.items():
        final.extend((key, value))
    return final
