"""Common type definitions for the keyshift library.

A key read from the source store is described by a ``SourceRecord``. The
transform step turns it into a ``TransformedRecord`` which is what gets written
to the target store. Both are created and consumed within a single key
transfer and never shared between concurrent transfers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Type tag reported by TYPE for a key that does not exist
KEY_NOT_FOUND = "none"

# TTL conventions inherited from the store
TTL_KEY_MISSING = -2
TTL_NO_EXPIRY = -1

# Value shapes, one per KeyType
RedisString = str
RedisHash = dict[str, str]
RedisList = list[str]
RedisSet = set[str]
RedisSortedSet = list[tuple[float, str]]
RedisJson = Any

RedisValue = RedisString | RedisHash | RedisList | RedisSet | RedisSortedSet | RedisJson


class KeyType(Enum):
    """
    Key types the pipeline knows how to read and write.

    Values are the tags reported by the store's TYPE command.
    """

    STRING = "string"
    HASH = "hash"
    LIST = "list"
    SET = "set"
    SORTED_SET = "zset"
    JSON = "ReJSON-RL"

    @classmethod
    def resolve(cls, tag: KeyType | str | None) -> KeyType | None:
        """
        Resolve a raw type tag to a KeyType.

        Args:
            tag: A KeyType member or a raw tag such as "zset"

        Returns:
            The matching KeyType, or None for any unrecognized tag
        """
        if isinstance(tag, KeyType):
            return tag
        try:
            return cls(tag)
        except ValueError:
            return None


@dataclass(frozen=True)
class SourceRecord:
    """
    A key as read from the source store.

    Attributes:
        key: Source key name
        key_type: Type of the key on the source
        value: Full value, shaped according to key_type
        ttl_seconds: -2 if the key is gone, -1 if it never expires,
            otherwise the seconds remaining
    """

    key: str
    key_type: KeyType
    value: RedisValue
    ttl_seconds: int

    @property
    def has_expiration(self) -> bool:
        """Check if the source key carries an expiration."""
        return self.ttl_seconds > TTL_NO_EXPIRY

    @property
    def is_missing(self) -> bool:
        """Check if the key vanished before its TTL could be read."""
        return self.ttl_seconds == TTL_KEY_MISSING


@dataclass(frozen=True)
class TransformedRecord:
    """
    Output of a transform: what to write on the target.

    new_type may differ from the source type and may be given as a raw tag.
    A tag that does not resolve to a KeyType abandons the write.
    """

    new_type: KeyType | str
    new_key: str
    new_value: RedisValue


Transform = Callable[[str, RedisValue, KeyType], TransformedRecord]


def identity_transform(key: str, value: RedisValue, key_type: KeyType) -> TransformedRecord:
    """Default transform: same key, same type, same value."""
    return TransformedRecord(new_type=key_type, new_key=key, new_value=value)


__all__ = [
    "KEY_NOT_FOUND",
    "TTL_KEY_MISSING",
    "TTL_NO_EXPIRY",
    "KeyType",
    "RedisHash",
    "RedisJson",
    "RedisList",
    "RedisSet",
    "RedisSortedSet",
    "RedisString",
    "RedisValue",
    "SourceRecord",
    "TransformedRecord",
    "Transform",
    "identity_transform",
]
