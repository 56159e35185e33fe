"""
Shared pytest fixtures for integration tests.

This module starts two Redis Stack containers (source and target) using
testcontainers. Redis Stack bundles the RedisJSON module needed for JSON keys.

If testcontainers or Docker is not available, tests are automatically skipped.
"""

from __future__ import annotations

import subprocess
from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
import pytest_asyncio
import redis.asyncio as aioredis

from keyshift.config import EndpointConfig, MigrationConfig

# ============================================================================
# Testcontainers Detection
# ============================================================================

TESTCONTAINERS_AVAILABLE = False

try:
    from testcontainers.redis import RedisContainer

    TESTCONTAINERS_AVAILABLE = True
except ImportError:
    RedisContainer = None  # type: ignore[assignment, misc]

REDIS_STACK_IMAGE = "redis/redis-stack-server:latest"


def is_docker_available() -> bool:
    """Check if Docker is available for running containers."""
    try:
        result = subprocess.run(
            ["docker", "info"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


DOCKER_AVAILABLE = is_docker_available()


# ============================================================================
# Skip Conditions
# ============================================================================

skip_if_no_redis_infra = pytest.mark.skipif(
    not (TESTCONTAINERS_AVAILABLE and DOCKER_AVAILABLE),
    reason="Redis test infrastructure not available",
)


# ============================================================================
# Container Fixtures
# ============================================================================


def _start_container() -> Any:
    if not TESTCONTAINERS_AVAILABLE or not DOCKER_AVAILABLE:
        pytest.skip("Redis testcontainer not available")
    container = RedisContainer(REDIS_STACK_IMAGE)
    container.start()
    return container


def _endpoint(container: Any) -> EndpointConfig:
    return EndpointConfig(
        host=container.get_container_host_ip(),
        port=int(container.get_exposed_port(6379)),
    )


@pytest.fixture(scope="session")
def source_container() -> Generator[Any, None, None]:
    """Provide the source Redis Stack container, shared across the session."""
    container = _start_container()
    yield container
    container.stop()


@pytest.fixture(scope="session")
def target_container() -> Generator[Any, None, None]:
    """Provide the target Redis Stack container, shared across the session."""
    container = _start_container()
    yield container
    container.stop()


@pytest.fixture
def source_endpoint(source_container: Any) -> EndpointConfig:
    return _endpoint(source_container)


@pytest.fixture
def target_endpoint(target_container: Any) -> EndpointConfig:
    return _endpoint(target_container)


@pytest.fixture
def redis_migration_config(
    source_endpoint: EndpointConfig, target_endpoint: EndpointConfig
) -> MigrationConfig:
    """Provide a MigrationConfig pointing at both containers."""
    return MigrationConfig(
        batch_size=25000,
        source=source_endpoint,
        target=target_endpoint,
        enable_tracing=False,
    )


# ============================================================================
# Client Fixtures
# ============================================================================


async def _client(endpoint: EndpointConfig) -> aioredis.Redis:
    # Use single_connection_client=True to avoid connection pool event loop issues
    client = aioredis.Redis(
        host=endpoint.host,
        port=endpoint.port,
        decode_responses=True,
        single_connection_client=True,
    )
    await client.flushall()
    return client


@pytest_asyncio.fixture
async def source_client(source_endpoint: EndpointConfig) -> AsyncGenerator[aioredis.Redis, None]:
    """
    Provide a client for seeding the source.

    Flushes the source before and after each test for isolation.
    """
    client = await _client(source_endpoint)
    yield client
    await client.flushall()
    await client.aclose()


@pytest_asyncio.fixture
async def target_client(target_endpoint: EndpointConfig) -> AsyncGenerator[aioredis.Redis, None]:
    """
    Provide a client for inspecting the target.

    Flushes the target before and after each test for isolation.
    """
    client = await _client(target_endpoint)
    yield client
    await client.flushall()
    await client.aclose()
