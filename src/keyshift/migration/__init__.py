"""
Keyspace migration pipeline for keyshift.

Key Components:
    - discover_keys: Cursor-based enumeration of matching source keys
    - chunk: Splits the key list into fixed-size batches
    - KeyTransfer: Reads, transforms and writes a single key
    - Migrator: Runs batches in order, keys within a batch concurrently

Usage:
    >>> from keyshift.migration import Migrator
    >>>
    >>> result = await Migrator(config).run()
    >>> print(f"{result.migrated} migrated, {result.failed} failed")
"""

from keyshift.migration.batching import chunk
from keyshift.migration.discovery import discover_keys
from keyshift.migration.migrator import Migrator, ProgressCallback, migrate
from keyshift.migration.models import (
    MigrationProgress,
    MigrationResult,
    TransferOutcome,
    TransferStatus,
)
from keyshift.migration.transfer import REASON_KEY_VANISHED, KeyTransfer

__all__ = [
    "KeyTransfer",
    "MigrationProgress",
    "MigrationResult",
    "Migrator",
    "ProgressCallback",
    "REASON_KEY_VANISHED",
    "TransferOutcome",
    "TransferStatus",
    "chunk",
    "discover_keys",
    "migrate",
]
