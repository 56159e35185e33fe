"""
Observability utilities for keyshift.

Tracing is composition-based: components accept a ``Tracer`` and default to
one built by ``create_tracer``. Attribute names live in
``keyshift.observability.attributes``.
"""

from keyshift.observability.attributes import (
    ATTR_BATCH_INDEX,
    ATTR_BATCH_SIZE,
    ATTR_DB_SYSTEM,
    ATTR_KEY,
    ATTR_KEY_TYPE,
    ATTR_KEYS_FAILED,
    ATTR_KEYS_MIGRATED,
    ATTR_KEYS_SKIPPED,
    ATTR_KEYS_TOTAL,
    ATTR_MATCH_PATTERN,
    ATTR_SCAN_COUNT,
    ATTR_SOURCE_ENDPOINT,
    ATTR_TARGET_ENDPOINT,
    ATTR_TARGET_KEY,
    ATTR_TRANSFER_STATUS,
)
from keyshift.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
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
