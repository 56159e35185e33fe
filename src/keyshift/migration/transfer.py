"""
Key Transfer - migrates a single key from source to target.

For one key the transfer:
    1. Looks up the key type on the source
    2. Reads the full value with the type's reader
    3. Reads the remaining TTL
    4. Applies the transform
    5. Deletes the destination key on the target
    6. Writes the transformed value with the type's writer
    7. Copies the expiration, if the source key had one

Deleting before writing makes a re-run replace the target value instead of
merging into it (no duplicate list entries, no stale hash fields). When the
transform returns an unsupported type the deletion has already happened and
the key is left absent on the target.

Every error is caught and returned as a FAILED outcome so that one bad key
never aborts the other transfers in its batch or later batches.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from keyshift.exceptions import UnsupportedKeyTypeError
from keyshift.migration.models import TransferOutcome
from keyshift.observability import (
    ATTR_KEY,
    ATTR_KEY_TYPE,
    ATTR_TARGET_KEY,
    ATTR_TRANSFER_STATUS,
    NullTracer,
    Tracer,
)
from keyshift.stores.interface import StoreConnection
from keyshift.types import (
    KEY_NOT_FOUND,
    KeyType,
    RedisSortedSet,
    RedisValue,
    SourceRecord,
    Transform,
    identity_transform,
)

logger = logging.getLogger(__name__)

REASON_KEY_VANISHED = "key no longer exists"

_CONTAINER_TYPES = frozenset({KeyType.HASH, KeyType.LIST, KeyType.SET, KeyType.SORTED_SET})


class KeyTransfer:
    """
    Migrates individual keys from a source to a target connection.

    One instance is shared by all concurrent transfers of a run; it holds no
    per-key state.

    Example:
        >>> transfer = KeyTransfer(source, target)
        >>> outcome = await transfer.transfer("user:42")
        >>> outcome.status
        <TransferStatus.MIGRATED: 'migrated'>
    """

    def __init__(
        self,
        source: StoreConnection,
        target: StoreConnection,
        transform: Transform = identity_transform,
        *,
        tracer: Tracer | None = None,
    ) -> None:
        self._source = source
        self._target = target
        self._transform = transform
        self._tracer = tracer or NullTracer()

    async def transfer(self, key: str) -> TransferOutcome:
        """
        Migrate one key.

        Args:
            key: Source key name

        Returns:
            MIGRATED, SKIPPED with a reason, or FAILED with the error.
            Never raises (apart from task cancellation).
        """
        with self._tracer.span("keyshift.transfer.key", {ATTR_KEY: key}) as span:
            outcome = await self._transfer(key)
            if span:
                span.set_attribute(ATTR_TRANSFER_STATUS, outcome.status.value)
                if outcome.target_key is not None:
                    span.set_attribute(ATTR_TARGET_KEY, outcome.target_key)
            return outcome

    async def _transfer(self, key: str) -> TransferOutcome:
        target_key: str | None = None
        try:
            type_tag = await self._source.type_of(key)
            if type_tag == KEY_NOT_FOUND:
                logger.info("Key '%s' no longer exists on source, skipping", key)
                return TransferOutcome.skipped(key, REASON_KEY_VANISHED)

            key_type = KeyType.resolve(type_tag)
            if key_type is None:
                logger.warning("Key '%s', with key type '%s' not handled!", key, type_tag)
                return TransferOutcome.skipped(key, f"unsupported key type '{type_tag}'")

            record = await self._read(key, key_type)
            if record is None or record.is_missing:
                logger.info("Key '%s' vanished while being read, skipping", key)
                return TransferOutcome.skipped(key, REASON_KEY_VANISHED)

            transformed = self._transform(record.key, record.value, record.key_type)
            target_key = transformed.new_key

            await self._target.delete_key(target_key)

            new_type = KeyType.resolve(transformed.new_type)
            if new_type is None:
                tag = getattr(transformed.new_type, "value", transformed.new_type)
                logger.warning(
                    "Transformed key type '%s' for key '%s' not handled!",
                    tag,
                    key,
                )
                return TransferOutcome.skipped(
                    key, f"unsupported target type '{tag}'", target_key=target_key
                )

            await self._write(target_key, new_type, transformed.new_value)

            if record.has_expiration:
                await self._target.set_expiration_seconds(target_key, record.ttl_seconds)

        except Exception as e:
            logger.error(
                "Error processing key '%s': %s",
                key,
                e,
                exc_info=True,
                extra={"key": key, "target_key": target_key},
            )
            return TransferOutcome.failed(key, e, target_key=target_key)

        logger.debug("Migrated key '%s' to '%s'", key, target_key)
        return TransferOutcome.migrated(key, target_key)

    async def _read(self, key: str, key_type: KeyType) -> SourceRecord | None:
        """
        Read a key's value and TTL.

        Returns:
            The record, or None if the key disappeared before its value was read.
        """
        with self._tracer.span(
            "keyshift.transfer.read",
            {ATTR_KEY: key, ATTR_KEY_TYPE: key_type.value},
        ):
            value = await self._read_value(key, key_type)
            # Redis has no empty containers: an empty read means the key is gone.
            # An empty string is a real value, and so is a JSON null document;
            # a vanished JSON key is caught by its TTL below.
            if (key_type is KeyType.STRING and value is None) or (
                key_type in _CONTAINER_TYPES and len(value) == 0
            ):
                return None
            ttl = await self._source.get_ttl_seconds(key)
            return SourceRecord(key=key, key_type=key_type, value=value, ttl_seconds=ttl)

    async def _read_value(self, key: str, key_type: KeyType) -> RedisValue:
        source = self._source
        if key_type is KeyType.STRING:
            return await source.get_string(key)
        if key_type is KeyType.HASH:
            return await source.get_hash(key)
        if key_type is KeyType.LIST:
            return await source.get_list(key)
        if key_type is KeyType.SET:
            return await source.get_set_members(key)
        if key_type is KeyType.SORTED_SET:
            return await source.get_sorted_set(key)
        if key_type is KeyType.JSON:
            return await source.get_json(key)
        raise UnsupportedKeyTypeError(key, key_type.value)

    async def _write(self, key: str, key_type: KeyType, value: RedisValue) -> None:
        target = self._target
        if key_type is KeyType.STRING:
            if not isinstance(value, str | bytes | int | float):
                raise TypeError(f"Cannot write {type(value).__name__} as a string")
            await target.set_string(key, value)
            return
        if key_type is KeyType.JSON:
            await target.set_json(key, value)
            return

        _check_collection(key_type, value)
        if len(value) == 0:
            # Redis cannot hold an empty container; the key stays absent
            logger.debug("Transformed value for '%s' is empty, nothing to write", key)
            return

        if key_type is KeyType.HASH:
            await target.set_hash(key, value)
        elif key_type is KeyType.LIST:
            await target.push_list(key, list(value))
        elif key_type is KeyType.SET:
            await target.add_set_members(key, set(value))
        elif key_type is KeyType.SORTED_SET:
            await target.add_sorted_set_members(key, _sorted_set_pairs(value))
        else:
            raise UnsupportedKeyTypeError(key, key_type.value)


def _check_collection(key_type: KeyType, value: RedisValue) -> None:
    """Reject values whose shape cannot be written as key_type."""
    if key_type is KeyType.HASH:
        valid = isinstance(value, Mapping)
    elif key_type is KeyType.SORTED_SET:
        valid = isinstance(value, Mapping | list | tuple)
    else:
        valid = isinstance(value, list | tuple | set | frozenset)
    if not valid:
        raise TypeError(f"Cannot write {type(value).__name__} as a {key_type.value}")


def _sorted_set_pairs(value: RedisSortedSet | Mapping[str, float]) -> RedisSortedSet:
    """Accept either (score, member) pairs or a {member: score} mapping."""
    if isinstance(value, Mapping):
        return [(float(score), member) for member, score in value.items()]
    return [(float(score), member) for score, member in value]


__all__ = ["KeyTransfer", "REASON_KEY_VANISHED"]
