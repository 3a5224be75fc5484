"""Redis-specific exceptions for ledger-sync-redis."""

from __future__ import annotations

from ledger_sync_core.primitives.exceptions import (
    CheckpointError,
    InfrastructureError,
)


class RedisError(InfrastructureError):
    """Base class for all Redis-related infrastructure errors."""


class RedisCheckpointError(RedisError, CheckpointError):
    """Raised when the checkpoint key cannot be read or written.

    Also a ``CheckpointError``, so the engine retries it like any other
    checkpoint failure.
    """
