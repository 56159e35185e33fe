"""
Key discovery using cursor-based scanning.

The whole matching keyspace is collected before migration starts. SCAN gives
no snapshot isolation: keys created or deleted while the scan runs may be
missed, and a key may be returned more than once. Repeats are dropped here;
misses are an accepted limitation.
"""

from __future__ import annotations

import logging

from keyshift.config import DEFAULT_MATCH_PATTERN, DEFAULT_SCAN_COUNT
from keyshift.exceptions import KeyDiscoveryError
from keyshift.observability import (
    ATTR_KEYS_TOTAL,
    ATTR_MATCH_PATTERN,
    ATTR_SCAN_COUNT,
    NullTracer,
    Tracer,
)
from keyshift.stores.interface import StoreConnection

logger = logging.getLogger(__name__)


async def discover_keys(
    connection: StoreConnection,
    pattern: str | None = None,
    page_size: int = DEFAULT_SCAN_COUNT,
    *,
    tracer: Tracer | None = None,
) -> list[str]:
    """
    Collect every key matching a pattern.

    Args:
        connection: Source store connection
        pattern: Glob pattern; None or "" matches every key
        page_size: COUNT hint per SCAN page
        tracer: Optional tracer

    Returns:
        Matching keys in first-seen order, without duplicates

    Raises:
        KeyDiscoveryError: If the scan fails. Discovery failures are fatal;
            a partial keyspace is never migrated.
    """
    pattern = pattern or DEFAULT_MATCH_PATTERN
    tracer = tracer or NullTracer()

    with tracer.span(
        "keyshift.discovery.scan",
        {ATTR_MATCH_PATTERN: pattern, ATTR_SCAN_COUNT: page_size},
    ) as span:
        seen: set[str] = set()
        keys: list[str] = []
        try:
            async for key in connection.scan_keys(pattern, page_size):
                if not key or key in seen:
                    continue
                seen.add(key)
                keys.append(key)
        except Exception as e:
            logger.error("Key discovery on %s failed: %s", connection.name, e)
            raise KeyDiscoveryError(pattern, str(e)) from e

        if span:
            span.set_attribute(ATTR_KEYS_TOTAL, len(keys))

    logger.info(
        "Found %d keys matching '%s' on %s",
        len(keys),
        pattern,
        connection.name,
    )
    return keys


__all__ = ["discover_keys"]
