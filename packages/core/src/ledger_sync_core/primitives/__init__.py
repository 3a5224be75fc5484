"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    CheckpointError,
    CheckpointRegressionError,
    EventDecodingError,
    FatalSyncError,
    HandlerError,
    InfrastructureError,
    LedgerSyncError,
    PersistenceError,
    ProjectionError,
    RecordStoreError,
    RetryableError,
    SourceUnavailableError,
    SyncHaltedError,
)

__all__ = [
    "CheckpointError",
    "CheckpointRegressionError",
    "EventDecodingError",
    "FatalSyncError",
    "HandlerError",
    "InfrastructureError",
    "LedgerSyncError",
    "PersistenceError",
    "ProjectionError",
    "RecordStoreError",
    "RetryableError",
    "SourceUnavailableError",
    "SyncHaltedError",
]
