"""Partitioning of the key list into fixed-size batches."""

from __future__ import annotations

from collections.abc import Sequence

from keyshift.exceptions import ConfigurationError


def chunk(keys: Sequence[str], size: int) -> list[list[str]]:
    """
    Split keys into consecutive batches.

    Every batch has ``size`` keys except possibly the last one.

    Args:
        keys: Keys in discovery order
        size: Maximum batch length (must be > 0)

    Returns:
        ``ceil(len(keys) / size)`` batches

    Raises:
        ConfigurationError: If size is not positive

    Example:
        >>> chunk(["k1", "k2", "k3", "k4", "k5"], 2)
        [['k1', 'k2'], ['k3', 'k4'], ['k5']]
    """
    if size <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {size}")
    return [list(keys[start : start + size]) for start in range(0, len(keys), size)]


__all__ = ["chunk"]
