"""keyshift command line interface.

Reads a YAML configuration file, applies command line overrides and runs one
migration. Exit status is 0 when the run completes (even if some keys
failed), 1 on a configuration, connection or discovery error, and 130 when
the run was interrupted by SIGINT or SIGTERM. The first signal stops the run
after the current batch; a second one aborts the batch in flight.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from keyshift import __version__
from keyshift.config import DEFAULT_CONFIG_PATH, MigrationConfig, load_config
from keyshift.exceptions import ConfigurationError, KeyshiftError
from keyshift.migration.migrator import Migrator
from keyshift.migration.models import MigrationResult

logger = logging.getLogger("keyshift")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="keyshift",
        description="Migrate data between two Redis instances",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to YAML configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--match", dest="match_pattern", help="Override the key match pattern")
    parser.add_argument("--batch-size", type=int, help="Override the number of keys per batch")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--no-tracing",
        action="store_true",
        help="Disable OpenTelemetry spans",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the keyshift CLI.

    Args:
        argv: Optional argument vector

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    try:
        config = _resolve_config(args)
        result = asyncio.run(_run(config))
    except KeyshiftError as e:
        logger.error("Error: %s", e)
        return EXIT_ERROR

    if result is None:
        return EXIT_CANCELLED
    if result.failed:
        for outcome in result.failures:
            logger.warning("Failed key '%s': %s", outcome.key, outcome.error_message)
    return EXIT_CANCELLED if result.cancelled else EXIT_OK


def _resolve_config(args: argparse.Namespace) -> MigrationConfig:
    """Load the config file and apply command line overrides."""
    config = load_config(args.config)

    overrides: dict[str, Any] = {}
    if args.match_pattern is not None:
        overrides["match_pattern"] = args.match_pattern
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.no_tracing:
        overrides["enable_tracing"] = False
    if not overrides:
        return config

    try:
        return MigrationConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid command line override: {e}") from e


class _SignalHandler:
    """
    Turns termination signals into migration cancellation.

    The first signal lets the in-flight batch settle before the run stops.
    A second signal cancels the run task, aborting the batch in flight.
    """

    def __init__(self, migrator: Migrator, task: asyncio.Task[MigrationResult]) -> None:
        self._migrator = migrator
        self._task = task
        self.aborted = False

    def __call__(self, sig: signal.Signals) -> None:
        if self._migrator.is_cancelled:
            logger.warning("Received second %s, aborting in-flight batch", sig.name)
            self.aborted = True
            self._task.cancel()
            return
        logger.info("Received %s, stopping after the current batch", sig.name)
        self._migrator.cancel()


async def _run(config: MigrationConfig) -> MigrationResult | None:
    """
    Run a migration, cancelling it on SIGINT/SIGTERM.

    Returns:
        The run summary, or None if a second signal aborted the run
    """
    migrator = Migrator(config)
    loop = asyncio.get_running_loop()
    task = asyncio.create_task(migrator.run())
    handler = _SignalHandler(migrator, task)
    registered: list[signal.Signals] = []

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handler, sig)
            registered.append(sig)
        except NotImplementedError:
            # Windows doesn't fully support add_signal_handler
            logger.debug("Signal handling not supported for %s", sig.name)

    try:
        return await task
    except asyncio.CancelledError:
        if not handler.aborted:
            raise
        logger.warning("Migration aborted; the last batch may be partially written")
        return None
    finally:
        for sig in registered:
            loop.remove_signal_handler(sig)


__all__ = ["build_parser", "main"]
