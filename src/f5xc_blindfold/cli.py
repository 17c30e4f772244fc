"""f5xc-unseal -- write files from blindfolded data held in JSON documents.

Usage:
    f5xc-unseal FILE [FILE ...]

Each FILE is a JSON object mapping an output path to base64 sealed data:

    {
      "/var/lib/foo/bar.yaml": "... base64 encoded sealed data ...",
      "/etc/foo.ini": "... base64 encoded sealed data ..."
    }

The command waits for Wingman to report ready, then unseals every value and
writes the plaintext to its path.  The first failure stops processing.

Environment:
    UNSEAL_WINGMAN_URL     Wingman base URL (default http://localhost:8070)
    UNSEAL_LOG_LEVEL       DEBUG, INFO, WARN(ING), ERROR (default WARNING)
    UNSEAL_POLL_INTERVAL   seconds between readiness probes (default 10)
    UNSEAL_READY_TIMEOUT   seconds to wait for readiness (default: forever)
    UNSEAL_REQUEST_TIMEOUT seconds allowed per HTTP request (default: none)
"""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import signal
import sys
from pathlib import Path

import httpx
from pydantic import TypeAdapter, ValidationError

from f5xc_blindfold.core.config import WingmanConfig
from f5xc_blindfold.core.errors import BlindfoldError
from f5xc_blindfold.isolation.memory import SecureMemory
from f5xc_blindfold.wingman.status import wait_for_ready
from f5xc_blindfold.wingman.unseal import unseal_encoded

logger = logging.getLogger("f5xc_blindfold.cli")

# Output files are group readable.
OUTPUT_FILE_MODE = 0o640

_DOCUMENT_ADAPTER = TypeAdapter(dict[str, str])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="f5xc-unseal",
        description="Unseal blindfolded data through Wingman and write it to files.",
    )
    parser.add_argument(
        "files", nargs="*", metavar="FILE",
        help="JSON document mapping output paths to base64 sealed data",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def write_plaintext(path: str | os.PathLike[str], data: bytes | bytearray) -> None:
    """Create or truncate *path* with mode 0640 and write *data*."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OUTPUT_FILE_MODE)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


async def process(
    client: httpx.AsyncClient,
    endpoint: str,
    payload: bytes,
    *,
    timeout: float | None = None,
) -> None:
    """Unseal every entry of one JSON *payload* and write it to its path.

    Raises
    ------
    pydantic.ValidationError
        If *payload* is not a JSON object of strings.
    BlindfoldError
        From :func:`~f5xc_blindfold.wingman.unseal.unseal_encoded`.
    OSError
        If an output file cannot be written.
    """
    logger.debug("Processing JSON payload")
    entries = _DOCUMENT_ADAPTER.validate_json(payload)
    for path, sealed in entries.items():
        logger.debug("Processing entry for %s", path)
        unsealed = await unseal_encoded(
            client, endpoint, sealed.encode("utf-8"), timeout=timeout,
        )
        with SecureMemory(bytearray(unsealed)) as data:
            write_plaintext(path, data)


_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def run(
    files: list[str],
    config: WingmanConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Wait for Wingman, then process *files* in order.  Returns an exit code.

    SIGINT and SIGTERM cancel the work in progress.  *transport* replaces
    the default HTTP transport.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    installed = []
    for sig in _STOP_SIGNALS:
        # Unavailable off the main thread and on Windows.
        with contextlib.suppress(NotImplementedError, ValueError, RuntimeError):
            loop.add_signal_handler(sig, task.cancel)
            installed.append(sig)
    try:
        return await _unseal_files(files, config, transport)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def _unseal_files(
    files: list[str],
    config: WingmanConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    async with httpx.AsyncClient(
        transport=transport, timeout=config.request_timeout,
    ) as client:
        try:
            await wait_for_ready(
                client, config.url, config.poll_interval, timeout=config.ready_timeout,
            )
        except (BlindfoldError, asyncio.CancelledError) as exc:
            logger.error("Wingman at %s failed to reach ready status: %s", config.url, exc)
            return 1

        for source_file in files:
            logger.debug("Attempting to retrieve file data from %s", source_file)
            try:
                data = Path(source_file).read_bytes()
            except OSError as exc:
                logger.error("Error reading JSON document from %s: %s", source_file, exc)
                return 1
            try:
                await process(client, config.url, data, timeout=config.request_timeout)
            except (BlindfoldError, ValidationError, OSError) as exc:
                logger.error("Processing %s failed: %s", source_file, exc)
                return 1
            except asyncio.CancelledError:
                logger.error("Processing %s was interrupted", source_file)
                return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = WingmanConfig.from_env()
    except ValidationError as exc:
        configure_logging("WARNING")
        logger.error("Invalid UNSEAL_* configuration: %s", exc)
        return 1
    configure_logging(config.log_level)

    if not args.files:
        logger.error("No JSON files provided")
        return 1
    return asyncio.run(run(args.files, config))


if __name__ == "__main__":
    raise SystemExit(main())
