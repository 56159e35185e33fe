"""Redis store connection using redis.asyncio.

This module provides the production StoreConnection. JSON keys are read and
written through the RedisJSON command group exposed by ``client.json()``, so
the server needs the RedisJSON module (Redis Stack) only if JSON keys are
actually migrated.

Example:
    >>> from keyshift.config import EndpointConfig
    >>> from keyshift.stores.redis import RedisStoreConnection
    >>>
    >>> conn = RedisStoreConnection(EndpointConfig(host="localhost", port=6379))
    >>> await conn.connect()
    >>> await conn.type_of("user:1")
    'hash'
    >>> await conn.close()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from keyshift.config import EndpointConfig
from keyshift.exceptions import ConnectionSetupError
from keyshift.stores.interface import StoreConnection
from keyshift.types import RedisHash, RedisJson, RedisList, RedisSet, RedisSortedSet

logger = logging.getLogger(__name__)

JSON_ROOT_PATH = "$"

# Non-UTF-8 bytes decode to lone surrogates and encode back unchanged, so
# binary strings (bitmaps, HyperLogLogs) survive the str round trip.
BINARY_SAFE_ERRORS = "surrogateescape"


class RedisStoreConnection(StoreConnection):
    """
    StoreConnection backed by a redis.asyncio client.

    Responses are decoded as UTF-8 strings, with invalid bytes escaped so they
    are written back unchanged. Per-command timeouts come from
    ``EndpointConfig.socket_timeout``; the pipeline adds no timeout of its own.

    Args:
        endpoint: Connection settings
        client: Optional pre-built client (mainly for tests). When given,
            ``connect()`` only pings it.
    """

    def __init__(self, endpoint: EndpointConfig, *, client: Redis | None = None) -> None:
        self._endpoint = endpoint
        self._redis: Redis | None = client
        self._owns_client = client is None
        self._connected = False

    @property
    def name(self) -> str:
        return self._endpoint.display_name

    @property
    def endpoint(self) -> EndpointConfig:
        """Get the endpoint configuration."""
        return self._endpoint

    @property
    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._connected

    @property
    def client(self) -> Redis:
        """
        Get the underlying client.

        Raises:
            RuntimeError: If not connected
        """
        if self._redis is None or not self._connected:
            raise RuntimeError(f"Redis connection {self.name} is not open")
        return self._redis

    async def connect(self) -> None:
        if self._connected:
            logger.warning("Redis connection %s already open", self.name)
            return

        try:
            if self._redis is None:
                self._redis = aioredis.Redis(
                    host=self._endpoint.host,
                    port=self._endpoint.port,
                    db=self._endpoint.db,
                    username=self._endpoint.username,
                    password=self._endpoint.password,
                    socket_timeout=self._endpoint.socket_timeout,
                    socket_connect_timeout=self._endpoint.socket_connect_timeout,
                    decode_responses=True,
                    encoding_errors=BINARY_SAFE_ERRORS,
                )
            await self._redis.ping()
        except (RedisError, OSError) as e:
            logger.error("Failed to connect to Redis %s: %s", self.name, e)
            if self._redis is not None and self._owns_client:
                await self._redis.aclose()
                self._redis = None
            raise ConnectionSetupError(self.name, str(e)) from e

        self._connected = True
        logger.info(
            "Connected to Redis",
            extra={"endpoint": self.name, "url": self._endpoint.display_url},
        )

    async def close(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None
        self._connected = False
        logger.info("Disconnected from Redis", extra={"endpoint": self.name})

    async def type_of(self, key: str) -> str:
        return str(await self.client.type(key))

    async def get_ttl_seconds(self, key: str) -> int:
        return int(await self.client.ttl(key))

    async def scan_keys(self, pattern: str, page_size: int) -> AsyncIterator[str]:
        async for key in self.client.scan_iter(match=pattern, count=page_size):
            yield key

    async def get_string(self, key: str) -> str | None:
        return await self.client.get(key)

    async def get_hash(self, key: str) -> RedisHash:
        return dict(await self.client.hgetall(key))

    async def get_list(self, key: str) -> RedisList:
        return list(await self.client.lrange(key, 0, -1))

    async def get_set_members(self, key: str) -> RedisSet:
        return set(await self.client.smembers(key))

    async def get_sorted_set(self, key: str) -> RedisSortedSet:
        entries = await self.client.zrange(key, 0, -1, withscores=True)
        return [(float(score), member) for member, score in entries]

    async def get_json(self, key: str) -> RedisJson:
        # With no path argument JSON.GET uses the legacy root path and
        # returns the document itself rather than a one-element array.
        return await self.client.json().get(key)

    async def set_string(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def set_hash(self, key: str, value: RedisHash) -> None:
        await self.client.hset(key, mapping=value)

    async def push_list(self, key: str, values: RedisList) -> None:
        await self.client.rpush(key, *values)

    async def add_set_members(self, key: str, members: RedisSet) -> None:
        await self.client.sadd(key, *members)

    async def add_sorted_set_members(self, key: str, members: RedisSortedSet) -> None:
        await self.client.zadd(key, {member: score for score, member in members})

    async def set_json(self, key: str, document: RedisJson) -> None:
        await self.client.json().set(key, JSON_ROOT_PATH, document)

    async def delete_key(self, key: str) -> None:
        await self.client.delete(key)

    async def set_expiration_seconds(self, key: str, seconds: int) -> None:
        await self.client.expire(key, seconds)


__all__ = ["RedisStoreConnection"]
