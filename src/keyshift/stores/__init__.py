"""
Store connections for keyshift.

- StoreConnection: Abstract interface used by the migration pipeline
- RedisStoreConnection: Production implementation on redis.asyncio
- InMemoryStoreConnection: Dictionary-backed implementation for tests
"""

from keyshift.stores.in_memory import InMemoryStoreConnection, WrongTypeError
from keyshift.stores.interface import StoreConnection
from keyshift.stores.redis import RedisStoreConnection

__all__ = [
    "InMemoryStoreConnection",
    "RedisStoreConnection",
    "StoreConnection",
    "WrongTypeError",
]
