"""
Data models for keyshift migrations.

Enums:
    - TransferStatus: Terminal outcome of a single key transfer

Core Models:
    - TransferOutcome: Result of migrating one key
    - MigrationProgress: Progress snapshot emitted after each batch
    - MigrationResult: Summary of a completed (or cancelled) run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TransferStatus(Enum):
    """
    Terminal outcome of a key transfer.

    Attributes:
        MIGRATED: Key was written to the target.
        SKIPPED: Key was intentionally not written (unsupported type,
            vanished during the run). Not an error.
        FAILED: An error occurred while reading, transforming or writing.
    """

    MIGRATED = "migrated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TransferOutcome:
    """
    Result of migrating one key.

    Attributes:
        key: Source key name
        status: Terminal outcome
        target_key: Key written on the target (None if no transform ran)
        reason: Why the key was skipped (SKIPPED only)
        error: The exception that failed the transfer (FAILED only)
    """

    key: str
    status: TransferStatus
    target_key: str | None = None
    reason: str | None = None
    error: BaseException | None = None

    @classmethod
    def migrated(cls, key: str, target_key: str) -> TransferOutcome:
        return cls(key=key, status=TransferStatus.MIGRATED, target_key=target_key)

    @classmethod
    def skipped(cls, key: str, reason: str, target_key: str | None = None) -> TransferOutcome:
        return cls(key=key, status=TransferStatus.SKIPPED, target_key=target_key, reason=reason)

    @classmethod
    def failed(
        cls, key: str, error: BaseException, target_key: str | None = None
    ) -> TransferOutcome:
        return cls(key=key, status=TransferStatus.FAILED, target_key=target_key, error=error)

    @property
    def error_message(self) -> str | None:
        """Get the error message, if the transfer failed."""
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class MigrationProgress:
    """
    Progress snapshot emitted after each batch settles.

    Attributes:
        keys_total: Number of keys discovered
        keys_processed: Keys that reached a terminal outcome so far
        migrated: Keys migrated so far
        skipped: Keys skipped so far
        failed: Keys failed so far
        batches_completed: Batches fully settled
        batches_total: Number of batches in the run
        keys_per_second: Processing rate since the first batch started
    """

    keys_total: int
    keys_processed: int
    migrated: int
    skipped: int
    failed: int
    batches_completed: int
    batches_total: int
    keys_per_second: float

    @property
    def progress_percent(self) -> float:
        """
        Calculate progress as percentage (0-100).

        Returns:
            Progress percentage, or 100.0 when there is nothing to migrate.
        """
        if self.keys_total == 0:
            return 100.0
        return min(100.0, (self.keys_processed / self.keys_total) * 100)


@dataclass
class MigrationResult:
    """
    Summary of a migration run.

    Attributes:
        keys_total: Number of keys discovered
        migrated: Keys written to the target
        skipped: Keys intentionally not written
        failed: Keys whose transfer raised an error
        duration_seconds: Wall-clock time of the run
        cancelled: Whether the run stopped early on request
        failures: Outcomes of the failed keys
    """

    keys_total: int = 0
    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    cancelled: bool = False
    failures: list[TransferOutcome] = field(default_factory=list)

    @property
    def keys_processed(self) -> int:
        return self.migrated + self.skipped + self.failed

    @property
    def success(self) -> bool:
        """True if every discovered key was processed without failure."""
        return self.failed == 0 and not self.cancelled

    def record(self, outcome: TransferOutcome) -> None:
        """Fold one key outcome into the counters."""
        if outcome.status is TransferStatus.MIGRATED:
            self.migrated += 1
        elif outcome.status is TransferStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.failures.append(outcome)


__all__ = [
    "MigrationProgress",
    "MigrationResult",
    "TransferOutcome",
    "TransferStatus",
]
