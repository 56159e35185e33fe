"""
keyshift - Migrate the keyspace of one Redis instance into another.

This library provides:
- Cursor-based key discovery with glob patterns
- Batched, concurrent per-key migration of strings, hashes, lists, sets,
  sorted sets and RedisJSON documents
- TTL propagation and idempotent delete-then-write semantics
- Optional per-key transforms to rename keys, change types or rewrite values
- Per-key failure isolation with a summary of migrated/skipped/failed keys
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("keyshift")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from keyshift.config import EndpointConfig, MigrationConfig, load_config
from keyshift.exceptions import (
    ConfigurationError,
    ConnectionSetupError,
    KeyDiscoveryError,
    KeyshiftError,
    UnsupportedKeyTypeError,
)
from keyshift.migration import (
    KeyTransfer,
    MigrationProgress,
    MigrationResult,
    Migrator,
    TransferOutcome,
    TransferStatus,
    chunk,
    discover_keys,
    migrate,
)
from keyshift.stores import InMemoryStoreConnection, RedisStoreConnection, StoreConnection
from keyshift.types import (
    KeyType,
    RedisValue,
    SourceRecord,
    Transform,
    TransformedRecord,
    identity_transform,
)

__all__ = [
    "__version__",
    # Configuration
    "EndpointConfig",
    "MigrationConfig",
    "load_config",
    # Exceptions
    "ConfigurationError",
    "ConnectionSetupError",
    "KeyDiscoveryError",
    "KeyshiftError",
    "UnsupportedKeyTypeError",
    # Types
    "KeyType",
    "RedisValue",
    "SourceRecord",
    "Transform",
    "TransformedRecord",
    "identity_transform",
    # Stores
    "InMemoryStoreConnection",
    "RedisStoreConnection",
    "StoreConnection",
    # Migration
    "KeyTransfer",
    "MigrationProgress",
    "MigrationResult",
    "Migrator",
    "TransferOutcome",
    "TransferStatus",
    "chunk",
    "discover_keys",
    "migrate",
]
