"""Redis integration for the ledger sync toolkit."""

from __future__ import annotations

from .checkpoints import RedisCheckpointStore
from .exceptions import RedisCheckpointError, RedisError

__all__ = [
    "RedisCheckpointError",
    "RedisCheckpointStore",
    "RedisError",
]
