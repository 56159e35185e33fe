"""
Store connection interface.

The migration pipeline talks to the source and target stores only through
this interface. Concrete implementations:

- StoreConnection: Abstract base class
- RedisStoreConnection: redis.asyncio client (keyshift.stores.redis)
- InMemoryStoreConnection: Dictionary-backed store for tests (keyshift.stores.in_memory)

A single connection is shared by every concurrent key transfer in a batch.
Implementations must therefore be safe for concurrent use from one event loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from types import TracebackType
from typing import Self

from keyshift.types import RedisHash, RedisJson, RedisList, RedisSet, RedisSortedSet


class StoreConnection(ABC):
    """
    Abstract base class for key-value store connections.

    Read methods return the whole value; nothing is paginated except
    ``scan_keys``. Write methods never clear existing data: callers delete the
    key first when they need replace semantics.

    Example:
        >>> async with RedisStoreConnection(EndpointConfig(port=6380)) as conn:
        ...     async for key in conn.scan_keys("user:*", page_size=1000):
        ...         print(key, await conn.type_of(key))
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable endpoint name for logs."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the connection.

        Raises:
            ConnectionSetupError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Calling it again is a no-op."""
        pass

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Inspection

    @abstractmethod
    async def type_of(self, key: str) -> str:
        """
        Get the raw type tag of a key.

        Returns:
            A tag such as "string" or "zset", or "none" if the key does not exist
        """
        pass

    @abstractmethod
    async def get_ttl_seconds(self, key: str) -> int:
        """
        Get remaining time-to-live.

        Returns:
            -2 if the key does not exist, -1 if it has no expiration,
            otherwise the remaining seconds
        """
        pass

    @abstractmethod
    def scan_keys(self, pattern: str, page_size: int) -> AsyncIterator[str]:
        """
        Iterate over keys matching a glob pattern using cursor paging.

        Args:
            pattern: Glob pattern ("*" matches everything)
            page_size: COUNT hint per page

        Yields:
            Key names. A key may be yielded more than once if the keyspace
            changes during the scan.
        """
        pass

    # Readers

    @abstractmethod
    async def get_string(self, key: str) -> str | None:
        pass

    @abstractmethod
    async def get_hash(self, key: str) -> RedisHash:
        pass

    @abstractmethod
    async def get_list(self, key: str) -> RedisList:
        pass

    @abstractmethod
    async def get_set_members(self, key: str) -> RedisSet:
        pass

    @abstractmethod
    async def get_sorted_set(self, key: str) -> RedisSortedSet:
        """Get all members as (score, member) pairs in ascending score order."""
        pass

    @abstractmethod
    async def get_json(self, key: str) -> RedisJson:
        """Get the JSON document at the root path."""
        pass

    # Writers

    @abstractmethod
    async def set_string(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def set_hash(self, key: str, value: RedisHash) -> None:
        pass

    @abstractmethod
    async def push_list(self, key: str, values: RedisList) -> None:
        """Append values to the tail of the list, preserving their order."""
        pass

    @abstractmethod
    async def add_set_members(self, key: str, members: RedisSet) -> None:
        pass

    @abstractmethod
    async def add_sorted_set_members(self, key: str, members: RedisSortedSet) -> None:
        """Add (score, member) pairs."""
        pass

    @abstractmethod
    async def set_json(self, key: str, document: RedisJson) -> None:
        """Set the JSON document at the root path."""
        pass

    @abstractmethod
    async def delete_key(self, key: str) -> None:
        pass

    @abstractmethod
    async def set_expiration_seconds(self, key: str, seconds: int) -> None:
        pass


__all__ = ["StoreConnection"]
