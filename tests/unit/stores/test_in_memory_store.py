"""
Unit tests for InMemoryStoreConnection.

Tests cover:
- Connection lifecycle counters
- Type tags and TTL sentinels
- Readers and writers for each supported type
- WRONGTYPE behavior and value validation
- Paged scanning
"""

import pytest

from keyshift.stores.in_memory import InMemoryStoreConnection, WrongTypeError
from keyshift.types import KEY_NOT_FOUND, TTL_KEY_MISSING, TTL_NO_EXPIRY


class TestLifecycle:
    """Tests for connect/close."""

    @pytest.mark.asyncio
    async def test_context_manager_connects_and_closes(self) -> None:
        store = InMemoryStoreConnection("mem")

        async with store:
            assert store.is_connected

        assert not store.is_connected
        assert store.connect_count == 1
        assert store.close_count == 1

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        store = InMemoryStoreConnection()
        await store.connect()

        await store.close()
        await store.close()

        assert store.close_count == 1

    def test_name(self) -> None:
        assert InMemoryStoreConnection("source").name == "source"
        assert InMemoryStoreConnection().name == "memory"

    @pytest.mark.asyncio
    async def test_instances_do_not_share_data(self) -> None:
        first = InMemoryStoreConnection()
        second = InMemoryStoreConnection()

        await first.set_string("k", "v")

        assert await second.type_of("k") == KEY_NOT_FOUND


class TestInspection:
    """Tests for type_of() and get_ttl_seconds()."""

    @pytest.mark.asyncio
    async def test_type_tags(self, populated_source: InMemoryStoreConnection) -> None:
        assert await populated_source.type_of("string:1") == "string"
        assert await populated_source.type_of("hash:1") == "hash"
        assert await populated_source.type_of("list:1") == "list"
        assert await populated_source.type_of("set:1") == "set"
        assert await populated_source.type_of("zset:1") == "zset"
        assert await populated_source.type_of("json:1") == "ReJSON-RL"
        assert await populated_source.type_of("missing") == KEY_NOT_FOUND

    @pytest.mark.asyncio
    async def test_put_raw_uses_given_tag(self, source_store: InMemoryStoreConnection) -> None:
        source_store.put_raw("events", "stream")

        assert await source_store.type_of("events") == "stream"

    @pytest.mark.asyncio
    async def test_ttl_sentinels(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("k", "v")

        assert await source_store.get_ttl_seconds("k") == TTL_NO_EXPIRY
        assert await source_store.get_ttl_seconds("missing") == TTL_KEY_MISSING

    @pytest.mark.asyncio
    async def test_expiration_is_reported(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("k", "v")
        await source_store.set_expiration_seconds("k", 60)

        assert await source_store.get_ttl_seconds("k") == 60

    @pytest.mark.asyncio
    async def test_set_string_clears_expiration(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        await source_store.set_string("k", "v")
        await source_store.set_expiration_seconds("k", 60)

        await source_store.set_string("k", "w")

        assert await source_store.get_ttl_seconds("k") == TTL_NO_EXPIRY

    @pytest.mark.asyncio
    async def test_non_positive_expiration_deletes_key(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        await source_store.set_string("k", "v")

        await source_store.set_expiration_seconds("k", 0)

        assert await source_store.type_of("k") == KEY_NOT_FOUND

    @pytest.mark.asyncio
    async def test_expiration_on_missing_key_is_ignored(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        await source_store.set_expiration_seconds("missing", 60)

        assert source_store.keys() == []


class TestReadersAndWriters:
    """Tests for the per-type readers and writers."""

    @pytest.mark.asyncio
    async def test_string(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("k", "bar")

        assert await source_store.get_string("k") == "bar"
        assert await source_store.get_string("missing") is None

    @pytest.mark.asyncio
    async def test_numbers_are_stored_as_strings(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        await source_store.set_string("k", 42)

        assert await source_store.get_string("k") == "42"

    @pytest.mark.asyncio
    async def test_hash_merges_fields(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_hash("h", {"a": "1"})
        await source_store.set_hash("h", {"b": "2"})

        assert await source_store.get_hash("h") == {"a": "1", "b": "2"}

    @pytest.mark.asyncio
    async def test_list_appends_in_order(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.push_list("l", ["a", "b"])
        await source_store.push_list("l", ["c"])

        assert await source_store.get_list("l") == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_set_deduplicates(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.add_set_members("s", ["a", "b", "a"])

        assert await source_store.get_set_members("s") == {"a", "b"}

    @pytest.mark.asyncio
    async def test_sorted_set_orders_by_score(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        await source_store.add_sorted_set_members("z", [(100.0, "hundred"), (99.0, "ninety-nine")])

        assert await source_store.get_sorted_set("z") == [
            (99.0, "ninety-nine"),
            (100.0, "hundred"),
        ]

    @pytest.mark.asyncio
    async def test_sorted_set_updates_score(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.add_sorted_set_members("z", [(1.0, "m")])
        await source_store.add_sorted_set_members("z", [(5.0, "m")])

        assert await source_store.get_sorted_set("z") == [(5.0, "m")]

    @pytest.mark.asyncio
    async def test_json_is_copied(self, source_store: InMemoryStoreConnection) -> None:
        document = {"foo": {"bar": [1, 2]}}
        await source_store.set_json("j", document)

        document["foo"]["bar"].append(3)
        read = await source_store.get_json("j")
        read["foo"]["bar"].append(4)

        assert await source_store.get_json("j") == {"foo": {"bar": [1, 2]}}

    @pytest.mark.asyncio
    async def test_missing_collections_read_empty(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        assert await source_store.get_hash("missing") == {}
        assert await source_store.get_list("missing") == []
        assert await source_store.get_set_members("missing") == set()
        assert await source_store.get_sorted_set("missing") == []
        assert await source_store.get_json("missing") is None

    @pytest.mark.asyncio
    async def test_delete_key(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("k", "v")

        await source_store.delete_key("k")
        await source_store.delete_key("k")

        assert await source_store.type_of("k") == KEY_NOT_FOUND


class TestValidation:
    """Tests for WRONGTYPE errors and value shape checks."""

    @pytest.mark.asyncio
    async def test_wrong_type_read(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("k", "v")

        with pytest.raises(WrongTypeError) as exc_info:
            await source_store.get_hash("k")

        assert exc_info.value.expected == "hash"
        assert exc_info.value.actual == "string"
        assert "WRONGTYPE" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_wrong_type_write(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.push_list("k", ["a"])

        with pytest.raises(WrongTypeError):
            await source_store.add_set_members("k", {"a"})

    @pytest.mark.asyncio
    async def test_string_rejects_collections(
        self, source_store: InMemoryStoreConnection
    ) -> None:
        with pytest.raises(TypeError):
            await source_store.set_string("k", ["a"])

    @pytest.mark.asyncio
    async def test_hash_rejects_non_mapping(self, source_store: InMemoryStoreConnection) -> None:
        with pytest.raises(TypeError):
            await source_store.set_hash("k", ["a"])

    @pytest.mark.asyncio
    async def test_list_rejects_bare_string(self, source_store: InMemoryStoreConnection) -> None:
        with pytest.raises(TypeError):
            await source_store.push_list("k", "abc")

    @pytest.mark.asyncio
    async def test_set_rejects_mapping(self, source_store: InMemoryStoreConnection) -> None:
        with pytest.raises(TypeError):
            await source_store.add_set_members("k", {"a": "1"})


class TestScan:
    """Tests for scan_keys()."""

    @pytest.mark.asyncio
    async def test_pattern_match(self, populated_source: InMemoryStoreConnection) -> None:
        keys = [key async for key in populated_source.scan_keys("*set:*", 100)]

        assert sorted(keys) == ["set:1", "zset:1"]

    @pytest.mark.asyncio
    async def test_pattern_is_case_sensitive(self, source_store: InMemoryStoreConnection) -> None:
        await source_store.set_string("User:1", "v")
        await source_store.set_string("user:1", "v")

        keys = [key async for key in source_store.scan_keys("user:*", 100)]

        assert keys == ["user:1"]

    @pytest.mark.asyncio
    async def test_page_count(self, source_store: InMemoryStoreConnection) -> None:
        for i in range(7):
            await source_store.set_string(f"k{i}", "v")

        keys = [key async for key in source_store.scan_keys("*", 3)]

        assert len(keys) == 7
        assert source_store.scan_pages == 3
