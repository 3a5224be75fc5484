"""Redis implementation of the checkpoint store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError as RedisClientError

from ledger_sync_core.correlation import get_correlation_id
from ledger_sync_core.instrumentation import get_hook_registry
from ledger_sync_core.ports.checkpoint import ICheckpointStore

from .exceptions import RedisCheckpointError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

DEFAULT_CHECKPOINT_KEY = "lastProcessedBlock"


class RedisCheckpointStore(ICheckpointStore):
    """Checkpoint kept as a decimal string under a single Redis key.

    Lets several hosts share one checkpoint; a ``SET`` is atomic, so readers
    never observe a partial value.
    """

    def __init__(
        self, redis_client: Redis, key: str = DEFAULT_CHECKPOINT_KEY
    ) -> None:
        """
        Initialize checkpoint store with Redis client.

        Args:
            redis_client: Async Redis client instance.
            key: Key the checkpoint is stored under.
        """
        self._redis = redis_client
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> int | None:
        """Retrieve the checkpoint from Redis; invalid content reads as None."""
        try:
            value = await self._redis.get(self._key)
        except RedisClientError as exc:
            raise RedisCheckpointError(
                f"Cannot read checkpoint key {self._key!r}: {exc}"
            ) from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        try:
            position = int(value)
        except ValueError:
            position = -1
        if position < 0:
            logger.warning(
                "Checkpoint key %r holds invalid value %r; "
                "falling back to the configured start",
                self._key,
                value,
            )
            return None
        return position

    async def save(self, position: int) -> None:
        """Save the checkpoint in Redis."""
        registry = get_hook_registry()
        await registry.execute_all(
            "redis.checkpoint.save",
            {
                "checkpoint.backend": "redis",
                "checkpoint.key": self._key,
                "checkpoint.position": position,
                "correlation_id": get_correlation_id(),
            },
            lambda: self._save_internal(position),
        )

    async def _save_internal(self, position: int) -> None:
        try:
            await self._redis.set(self._key, str(position))
        except RedisClientError as exc:
            raise RedisCheckpointError(
                f"Cannot write checkpoint key {self._key!r}: {exc}"
            ) from exc
