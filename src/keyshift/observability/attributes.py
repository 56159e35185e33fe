"""
Standard span attributes for keyshift.

Attribute constants used across keyshift components for consistent span
naming. Database attributes follow OpenTelemetry semantic conventions.

Example:
    >>> from keyshift.observability.attributes import ATTR_KEY, ATTR_KEY_TYPE
    >>>
    >>> with tracer.span(
    ...     "keyshift.transfer.key",
    ...     {ATTR_KEY: key, ATTR_KEY_TYPE: key_type.value},
    ... ):
    ...     pass
"""

# =============================================================================
# Key Attributes
# =============================================================================

ATTR_KEY = "keyshift.key"
"""Source key name (string)."""

ATTR_TARGET_KEY = "keyshift.target_key"
"""Key name written on the target after transformation (string)."""

ATTR_KEY_TYPE = "keyshift.key.type"
"""Type tag of the source key (e.g., 'hash', 'zset')."""

ATTR_TRANSFER_STATUS = "keyshift.transfer.status"
"""Outcome of a key transfer: 'migrated', 'skipped' or 'failed'."""

# =============================================================================
# Run Attributes
# =============================================================================

ATTR_MATCH_PATTERN = "keyshift.match_pattern"
"""Glob pattern used for key discovery (string)."""

ATTR_BATCH_SIZE = "keyshift.batch.size"
"""Configured or actual number of keys in a batch (integer)."""

ATTR_BATCH_INDEX = "keyshift.batch.index"
"""Zero-based position of the batch within the run (integer)."""

ATTR_KEYS_TOTAL = "keyshift.keys.total"
"""Number of keys discovered for the run (integer)."""

ATTR_KEYS_MIGRATED = "keyshift.keys.migrated"
"""Number of keys migrated so far (integer)."""

ATTR_KEYS_SKIPPED = "keyshift.keys.skipped"
"""Number of keys skipped so far (integer)."""

ATTR_KEYS_FAILED = "keyshift.keys.failed"
"""Number of keys that failed so far (integer)."""

ATTR_SCAN_COUNT = "keyshift.scan.count"
"""COUNT hint passed to each SCAN page (integer)."""

# =============================================================================
# Database Attributes (OpenTelemetry semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier ('redis')."""

ATTR_SOURCE_ENDPOINT = "keyshift.source.endpoint"
"""host:port/db of the source store."""

ATTR_TARGET_ENDPOINT = "keyshift.target.endpoint"
"""host:port/db of the target store."""

__all__ = [
    "ATTR_BATCH_INDEX",
    "ATTR_BATCH_SIZE",
    "ATTR_DB_SYSTEM",
    "ATTR_KEY",
    "ATTR_KEY_TYPE",
    "ATTR_KEYS_FAILED",
    "ATTR_KEYS_MIGRATED",
    "ATTR_KEYS_SKIPPED",
    "ATTR_KEYS_TOTAL",
    "ATTR_MATCH_PATTERN",
    "ATTR_SCAN_COUNT",
    "ATTR_SOURCE_ENDPOINT",
    "ATTR_TARGET_ENDPOINT",
    "ATTR_TARGET_KEY",
    "ATTR_TRANSFER_STATUS",
]
