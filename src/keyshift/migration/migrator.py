"""
Migrator - orchestrates a keyspace migration between two stores.

The Migrator drives the whole run:

    connect source and target
        -> discover matching keys on the source
        -> split them into batches
        -> migrate each batch (keys concurrently, batches strictly in order)
        -> close both connections

Batch N+1 never starts before every key of batch N has reached a terminal
outcome, which bounds in-flight work to one batch. Per-key failures are
counted and reported in the MigrationResult; only setup failures
(configuration, connection, discovery) are raised.

Usage:
    >>> from keyshift import MigrationConfig, Migrator
    >>>
    >>> migrator = Migrator(config, transform=my_transform)
    >>> result = await migrator.run()
    >>> print(f"Migrated {result.migrated} keys, {result.failed} failures")
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence

from keyshift.config import MigrationConfig
from keyshift.exceptions import ConfigurationError
from keyshift.migration.batching import chunk
from keyshift.migration.discovery import discover_keys
from keyshift.migration.models import MigrationProgress, MigrationResult, TransferOutcome
from keyshift.migration.transfer import KeyTransfer
from keyshift.observability import (
    ATTR_BATCH_INDEX,
    ATTR_BATCH_SIZE,
    ATTR_DB_SYSTEM,
    ATTR_KEYS_FAILED,
    ATTR_KEYS_MIGRATED,
    ATTR_KEYS_SKIPPED,
    ATTR_KEYS_TOTAL,
    ATTR_MATCH_PATTERN,
    ATTR_SOURCE_ENDPOINT,
    ATTR_TARGET_ENDPOINT,
    Tracer,
    create_tracer,
)
from keyshift.stores.interface import StoreConnection
from keyshift.stores.redis import RedisStoreConnection
from keyshift.types import Transform, identity_transform

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[MigrationProgress], None]


class Migrator:
    """
    Migrates the matching keyspace of a source store into a target store.

    Source and target connections default to RedisStoreConnection instances
    built from the config; pass explicit connections to migrate between other
    StoreConnection implementations.

    Example:
        >>> migrator = Migrator(
        ...     config,
        ...     transform=lambda key, value, key_type: TransformedRecord(
        ...         new_type=key_type, new_key=f"v2:{key}", new_value=value
        ...     ),
        ...     progress_callback=lambda p: print(f"{p.progress_percent:.0f}%"),
        ... )
        >>> result = await migrator.run()

    Attributes:
        _config: Migration settings
        _transform: Pure function applied to every key before writing
        _source: Connection to read from
        _target: Connection to write to
        _is_cancelled: Flag indicating cancellation requested
    """

    def __init__(
        self,
        config: MigrationConfig,
        transform: Transform = identity_transform,
        *,
        source: StoreConnection | None = None,
        target: StoreConnection | None = None,
        tracer: Tracer | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """
        Initialize the migrator.

        Args:
            config: Migration settings
            transform: Function mapping (key, value, type) to a TransformedRecord.
                Defaults to the identity transform.
            source: Optional source connection (default: Redis from config.source)
            target: Optional target connection (default: Redis from config.target)
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on config.enable_tracing.
            progress_callback: Optional callback invoked after each batch

        Raises:
            ConfigurationError: If batch_size or scan_count is not positive
        """
        if config.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {config.batch_size}")
        if config.scan_count <= 0:
            raise ConfigurationError(f"scan_count must be positive, got {config.scan_count}")

        self._config = config
        self._transform = transform
        self._source = source or RedisStoreConnection(config.source)
        self._target = target or RedisStoreConnection(config.target)
        self._tracer = tracer or create_tracer(__name__, config.enable_tracing)
        self._progress_callback = progress_callback
        self._is_cancelled = False

    @property
    def config(self) -> MigrationConfig:
        """Get the configuration."""
        return self._config

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._is_cancelled

    def cancel(self) -> None:
        """
        Request cancellation.

        No new batch starts after this call. The batch in flight, if any, is
        allowed to settle and the connections are closed normally.
        """
        self._is_cancelled = True
        logger.info("Migration cancellation requested")

    async def run(self) -> MigrationResult:
        """
        Run the migration.

        Returns:
            Summary with migrated/skipped/failed counts

        Raises:
            ConnectionSetupError: If either store cannot be reached
            KeyDiscoveryError: If scanning the source fails
        """
        config = self._config
        result = MigrationResult()
        start_time = time.monotonic()

        with self._tracer.span(
            "keyshift.migrator.run",
            {
                ATTR_DB_SYSTEM: "redis",
                ATTR_MATCH_PATTERN: config.match_pattern,
                ATTR_BATCH_SIZE: config.batch_size,
                ATTR_SOURCE_ENDPOINT: self._source.name,
                ATTR_TARGET_ENDPOINT: self._target.name,
            },
        ) as span:
            try:
                await self._connect()

                logger.info(
                    "Scanning for keys using pattern '%s'",
                    config.match_pattern,
                )
                keys = await discover_keys(
                    self._source,
                    config.match_pattern,
                    config.scan_count,
                    tracer=self._tracer,
                )
                result.keys_total = len(keys)

                batches = chunk(keys, config.batch_size)
                logger.info(
                    "Found %d keys, starting migration in %d batches of up to %d",
                    len(keys),
                    len(batches),
                    config.batch_size,
                )

                transfer = KeyTransfer(
                    self._source,
                    self._target,
                    self._transform,
                    tracer=self._tracer,
                )

                for index, batch in enumerate(batches):
                    if self._is_cancelled:
                        result.cancelled = True
                        logger.warning(
                            "Migration cancelled after %d of %d batches",
                            index,
                            len(batches),
                        )
                        break

                    for outcome in await self._run_batch(transfer, index, batch):
                        result.record(outcome)

                    self._report_progress(result, index + 1, len(batches), start_time)

            finally:
                await self._close()

            result.duration_seconds = time.monotonic() - start_time

            if span:
                span.set_attribute(ATTR_KEYS_TOTAL, result.keys_total)
                span.set_attribute(ATTR_KEYS_MIGRATED, result.migrated)
                span.set_attribute(ATTR_KEYS_SKIPPED, result.skipped)
                span.set_attribute(ATTR_KEYS_FAILED, result.failed)

        logger.info(
            "Data migration %s: %d keys found, %d migrated, %d skipped, %d failed in %.1fs",
            "cancelled" if result.cancelled else "completed",
            result.keys_total,
            result.migrated,
            result.skipped,
            result.failed,
            result.duration_seconds,
        )
        return result

    async def _run_batch(
        self,
        transfer: KeyTransfer,
        index: int,
        batch: Sequence[str],
    ) -> list[TransferOutcome]:
        """
        Migrate every key of a batch concurrently and wait for all of them.

        Args:
            transfer: Shared key transfer
            index: Batch position in the run
            batch: Keys of this batch

        Returns:
            One outcome per key, in batch order
        """
        with self._tracer.span(
            "keyshift.migrator.batch",
            {ATTR_BATCH_INDEX: index, ATTR_BATCH_SIZE: len(batch)},
        ):
            results = await asyncio.gather(
                *(transfer.transfer(key) for key in batch),
                return_exceptions=True,
            )

        outcomes: list[TransferOutcome] = []
        for item in results:
            # KeyTransfer turns every Exception into an outcome; only task
            # cancellation comes back as an exception
            if isinstance(item, BaseException):
                raise item
            outcomes.append(item)
        return outcomes

    def _report_progress(
        self,
        result: MigrationResult,
        batches_completed: int,
        batches_total: int,
        start_time: float,
    ) -> None:
        elapsed = time.monotonic() - start_time
        processed = result.keys_processed
        progress = MigrationProgress(
            keys_total=result.keys_total,
            keys_processed=processed,
            migrated=result.migrated,
            skipped=result.skipped,
            failed=result.failed,
            batches_completed=batches_completed,
            batches_total=batches_total,
            keys_per_second=processed / elapsed if elapsed > 0 else 0.0,
        )
        logger.info(
            "Processed %d/%d keys (%.1f%%)",
            processed,
            result.keys_total,
            progress.progress_percent,
        )
        if self._progress_callback:
            self._progress_callback(progress)

    async def _connect(self) -> None:
        logger.info(
            "Connecting to source %s and target %s",
            self._source.name,
            self._target.name,
        )
        await self._source.connect()
        await self._target.connect()
        logger.info("Connected to source and target successfully")

    async def _close(self) -> None:
        """Close both connections; a failure closing one does not skip the other."""
        for connection in (self._source, self._target):
            try:
                await connection.close()
            except Exception as e:
                logger.warning(
                    "Error closing connection %s: %s",
                    connection.name,
                    e,
                    exc_info=True,
                )


async def migrate(
    config: MigrationConfig,
    transform: Transform = identity_transform,
    *,
    progress_callback: ProgressCallback | None = None,
) -> MigrationResult:
    """
    Run a migration with Redis connections built from the config.

    Args:
        config: Migration settings
        transform: Optional transform (default: identity)
        progress_callback: Optional callback invoked after each batch

    Returns:
        Summary of the run
    """
    migrator = Migrator(config, transform, progress_callback=progress_callback)
    return await migrator.run()


__all__ = ["Migrator", "ProgressCallback", "migrate"]
