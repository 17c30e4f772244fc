"""Parsers for vesctl's sealing output.

``vesctl request secrets encrypt`` prints a human-readable header line
followed by the sealed payload on the second line.  That layout is an
external contract owned by vesctl, so it lives behind :class:`OutputParser`
and can be replaced without touching the orchestration in
:mod:`f5xc_blindfold.seal.blindfold`.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class OutputParser(Protocol):
    """Extracts the sealed payload from vesctl's stdout."""

    #: Identifies the vesctl output layout this parser understands.
    contract: str

    def parse(self, output: bytes) -> bytes:
        """Return the sealed payload, or ``b""`` if the output has none."""
        ...


class SecondLineParser:
    """Discards the header line and returns the second line verbatim.

    The line terminator (``\\n`` or ``\\r\\n``) is stripped; nothing else
    is.  Output with fewer than two lines yields ``b""``.
    """

    contract = "vesctl-two-line/1"

    def parse(self, output: bytes) -> bytes:
        lines = output.splitlines()
        if len(lines) < 2:
            return b""
        return lines[1]


DEFAULT_OUTPUT_PARSER = SecondLineParser()
