"""
Shared pytest fixtures for the keyshift tests.

This module provides:
- In-memory source and target connections (source_store, target_store)
- A default MigrationConfig with tracing disabled (migration_config)
- A MockTracer for span assertions (mock_tracer)
- populate_source: seeds one key of each supported type
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from keyshift.config import EndpointConfig, MigrationConfig
from keyshift.observability import MockTracer
from keyshift.stores.in_memory import InMemoryStoreConnection


@pytest_asyncio.fixture
async def source_store() -> AsyncGenerator[InMemoryStoreConnection, None]:
    """Provide a connected, empty in-memory source store."""
    store = InMemoryStoreConnection("source")
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def target_store() -> AsyncGenerator[InMemoryStoreConnection, None]:
    """Provide a connected, empty in-memory target store."""
    store = InMemoryStoreConnection("target")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def migration_config() -> MigrationConfig:
    """Provide a MigrationConfig with a small batch size and tracing disabled."""
    return MigrationConfig(
        batch_size=3,
        scan_count=10,
        source=EndpointConfig(host="source.local"),
        target=EndpointConfig(host="target.local"),
        enable_tracing=False,
    )


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Provide a MockTracer that records spans."""
    return MockTracer()


async def populate_source(store: InMemoryStoreConnection) -> None:
    """Seed one key of each supported type."""
    await store.set_string("string:1", "bar")
    await store.set_hash("hash:1", {"field": "value", "other": "thing"})
    await store.push_list("list:1", ["first", "second", "third"])
    await store.add_set_members("set:1", {"a", "b", "c"})
    await store.add_sorted_set_members("zset:1", [(100.0, "One Hundred"), (99.0, "Ninety Nine")])
    await store.set_json("json:1", {"foo": "bar", "nested": {"list": [1, 2, 3]}})


@pytest_asyncio.fixture
async def populated_source(source_store: InMemoryStoreConnection) -> InMemoryStoreConnection:
    """Provide a source store holding one key of each supported type."""
    await populate_source(source_store)
    return source_store
