"""
Basic Migration Example

This example demonstrates a keyshift migration between two in-memory stores:
- Seeding a source with keys of different types
- Renaming keys with a transform
- Reporting progress after each batch
- Reading the run summary

Swap the in-memory stores for the defaults (Redis connections built from
MigrationConfig.source/target) to migrate real servers.

Run with: python examples/basic_migration.py
"""

import asyncio

from keyshift import (
    EndpointConfig,
    InMemoryStoreConnection,
    KeyType,
    MigrationConfig,
    MigrationProgress,
    Migrator,
    RedisValue,
    TransformedRecord,
)

# =============================================================================
# Step 1: Define a transform
# =============================================================================
# A transform is a pure function of (key, value, type). Here every key moves
# under a "v2:" namespace and session hashes become plain strings.


def to_v2(key: str, value: RedisValue, key_type: KeyType) -> TransformedRecord:
    if key.startswith("session:") and key_type is KeyType.HASH:
        return TransformedRecord(
            new_type=KeyType.STRING,
            new_key=f"v2:{key}",
            new_value=value.get("user", ""),
        )
    return TransformedRecord(new_type=key_type, new_key=f"v2:{key}", new_value=value)


def print_progress(progress: MigrationProgress) -> None:
    print(
        f"  batch {progress.batches_completed}/{progress.batches_total}: "
        f"{progress.keys_processed}/{progress.keys_total} keys "
        f"({progress.progress_percent:.0f}%)"
    )


# =============================================================================
# Step 2: Run the migration
# =============================================================================


async def main():
    """Demonstrate a basic migration."""
    print("=" * 60)
    print("keyshift Basic Migration Example")
    print("=" * 60)

    source = InMemoryStoreConnection("source")
    target = InMemoryStoreConnection("target")

    await source.set_string("greeting", "hello")
    await source.set_hash("session:42", {"user": "alice", "ip": "10.0.0.1"})
    await source.set_expiration_seconds("session:42", 3600)
    await source.push_list("queue:emails", ["a@example.com", "b@example.com"])
    await source.add_sorted_set_members("leaderboard", [(120.0, "bob"), (300.0, "alice")])
    source.put_raw("events", "stream")

    config = MigrationConfig(
        batch_size=2,
        source=EndpointConfig(host="old-redis"),
        target=EndpointConfig(host="new-redis"),
        enable_tracing=False,
    )
    migrator = Migrator(
        config,
        transform=to_v2,
        source=source,
        target=target,
        progress_callback=print_progress,
    )

    print("\nMigrating...")
    result = await migrator.run()

    print(f"\nMigrated: {result.migrated}, skipped: {result.skipped}, failed: {result.failed}")
    print(f"Target keys: {target.keys()}")
    print(f"v2:session:42 = {await target.get_string('v2:session:42')!r}")
    print(f"v2:session:42 ttl = {await target.get_ttl_seconds('v2:session:42')}s")


if __name__ == "__main__":
    asyncio.run(main())
