"""Ledger-to-store sync engine — catch-up, live follow, projectors, checkpoints."""

from __future__ import annotations

from .checkpoint import (
    DEFAULT_CHECKPOINT_KEY,
    FileCheckpointStore,
    InMemoryCheckpointStore,
)
from .engine import SyncEngine, SyncState
from .projectors import create_once, default_registry
from .ranges import BlockRange, partition_range, pending_ranges
from .registry import Projector, ProjectorRegistry

__all__ = [
    "DEFAULT_CHECKPOINT_KEY",
    "BlockRange",
    "FileCheckpointStore",
    "InMemoryCheckpointStore",
    "Projector",
    "ProjectorRegistry",
    "SyncEngine",
    "SyncState",
    "create_once",
    "default_registry",
    "partition_range",
    "pending_ranges",
]
