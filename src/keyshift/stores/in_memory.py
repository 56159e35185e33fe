"""
In-memory store connection implementation.

Useful for testing and dry runs. Keys live in a dictionary owned by the
instance, so two InMemoryStoreConnection objects never share data.

Differences from Redis worth knowing about:
    - TTLs do not count down; ``get_ttl_seconds`` returns what was set.
    - SCAN pages are taken from a sorted snapshot of the keyspace, so each
      key is yielded exactly once.
"""

from __future__ import annotations

import copy
import fnmatch
from collections.abc import AsyncIterator, Mapping
from typing import Any

from keyshift.stores.interface import StoreConnection
from keyshift.types import (
    KEY_NOT_FOUND,
    TTL_KEY_MISSING,
    TTL_NO_EXPIRY,
    KeyType,
    RedisHash,
    RedisJson,
    RedisList,
    RedisSet,
    RedisSortedSet,
)


class WrongTypeError(Exception):
    """Raised when an operation targets a key holding a different type."""

    def __init__(self, key: str, expected: str, actual: str) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"WRONGTYPE Operation against key '{key}' holding '{actual}', expected '{expected}'"
        )


class InMemoryStoreConnection(StoreConnection):
    """
    Dictionary-backed StoreConnection.

    Thread-safety:
        Not thread-safe. Safe for concurrent coroutines on one event loop
        since no method awaits while mutating state.

    Example:
        >>> store = InMemoryStoreConnection("source")
        >>> await store.connect()
        >>> await store.set_string("greeting", "hello")
        >>> await store.type_of("greeting")
        'string'

    Attributes:
        connect_count: Number of times connect() was called
        close_count: Number of times close() actually closed the connection
        scan_pages: Number of SCAN pages served
    """

    def __init__(self, name: str = "memory") -> None:
        self._name = name
        self._data: dict[str, tuple[str, Any]] = {}
        self._ttls: dict[str, int] = {}
        self._connected = False
        self.connect_count = 0
        self.close_count = 0
        self.scan_pages = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self.connect_count += 1
        self._connected = True

    async def close(self) -> None:
        if not self._connected:
            return
        self._connected = False
        self.close_count += 1

    # Test helpers

    def put_raw(self, key: str, type_tag: str, value: Any = None) -> None:
        """Store a value under an arbitrary type tag (e.g., "stream")."""
        self._data[key] = (type_tag, value)
        self._ttls.pop(key, None)

    def keys(self) -> list[str]:
        """Get all keys in sorted order."""
        return sorted(self._data)

    def clear(self) -> None:
        """Remove all keys."""
        self._data.clear()
        self._ttls.clear()

    # Inspection

    async def type_of(self, key: str) -> str:
        entry = self._data.get(key)
        return entry[0] if entry else KEY_NOT_FOUND

    async def get_ttl_seconds(self, key: str) -> int:
        if key not in self._data:
            return TTL_KEY_MISSING
        return self._ttls.get(key, TTL_NO_EXPIRY)

    async def scan_keys(self, pattern: str, page_size: int) -> AsyncIterator[str]:
        snapshot = sorted(self._data)
        for start in range(0, len(snapshot), page_size):
            self.scan_pages += 1
            for key in snapshot[start : start + page_size]:
                if fnmatch.fnmatchcase(key, pattern):
                    yield key

    # Readers

    async def get_string(self, key: str) -> str | None:
        if key not in self._data:
            return None
        return str(self._read(key, KeyType.STRING))

    async def get_hash(self, key: str) -> RedisHash:
        return dict(self._read(key, KeyType.HASH, {}))

    async def get_list(self, key: str) -> RedisList:
        return list(self._read(key, KeyType.LIST, []))

    async def get_set_members(self, key: str) -> RedisSet:
        return set(self._read(key, KeyType.SET, set()))

    async def get_sorted_set(self, key: str) -> RedisSortedSet:
        members: dict[str, float] = self._read(key, KeyType.SORTED_SET, {})
        return sorted((score, member) for member, score in members.items())

    async def get_json(self, key: str) -> RedisJson:
        return copy.deepcopy(self._read(key, KeyType.JSON))

    # Writers

    async def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str | bytes | int | float):
            raise TypeError(f"Invalid string value for key '{key}': {type(value).__name__}")
        self._data[key] = (KeyType.STRING.value, str(value))
        self._ttls.pop(key, None)

    async def set_hash(self, key: str, value: RedisHash) -> None:
        if not isinstance(value, Mapping):
            raise TypeError(f"Invalid hash value for key '{key}': {type(value).__name__}")
        fields: dict[str, str] = self._read(key, KeyType.HASH, {})
        fields.update({str(k): str(v) for k, v in value.items()})
        self._data[key] = (KeyType.HASH.value, fields)

    async def push_list(self, key: str, values: RedisList) -> None:
        if isinstance(values, str | Mapping):
            raise TypeError(f"Invalid list value for key '{key}': {type(values).__name__}")
        items: list[str] = self._read(key, KeyType.LIST, [])
        items.extend(str(v) for v in values)
        self._data[key] = (KeyType.LIST.value, items)

    async def add_set_members(self, key: str, members: RedisSet) -> None:
        if isinstance(members, str | Mapping):
            raise TypeError(f"Invalid set value for key '{key}': {type(members).__name__}")
        current: set[str] = self._read(key, KeyType.SET, set())
        current.update(str(m) for m in members)
        self._data[key] = (KeyType.SET.value, current)

    async def add_sorted_set_members(self, key: str, members: RedisSortedSet) -> None:
        current: dict[str, float] = self._read(key, KeyType.SORTED_SET, {})
        for score, member in members:
            current[str(member)] = float(score)
        self._data[key] = (KeyType.SORTED_SET.value, current)

    async def set_json(self, key: str, document: RedisJson) -> None:
        self._data[key] = (KeyType.JSON.value, copy.deepcopy(document))

    async def delete_key(self, key: str) -> None:
        self._data.pop(key, None)
        self._ttls.pop(key, None)

    async def set_expiration_seconds(self, key: str, seconds: int) -> None:
        if key not in self._data:
            return
        if seconds <= 0:
            await self.delete_key(key)
            return
        self._ttls[key] = seconds

    def _read(self, key: str, key_type: KeyType, default: Any = None) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return default
        tag, value = entry
        if tag != key_type.value:
            raise WrongTypeError(key, key_type.value, tag)
        return value


__all__ = ["InMemoryStoreConnection", "WrongTypeError"]
