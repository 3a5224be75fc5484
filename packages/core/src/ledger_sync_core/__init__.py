"""ledger-sync-core — Foundation package for the ledger sync toolkit.

Event catalog, ports, exceptions and instrumentation. No infrastructure
dependencies beyond pydantic.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import (
    InMemoryEventSource,
    InMemoryRecordStore,
    InMemorySubscription,
)
from .correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    range_correlation_id,
    set_correlation_id,
)

# ── Domain ──────────────────────────────────────────────────────
from .domain import (
    EVENT_TYPES,
    NATURAL_KEYS,
    Collection,
    EventKind,
    LedgerEvent,
    RawLog,
    RewardClaimed,
    RewardTokenRegistered,
    RewardTokenUpdated,
    Staked,
    StakeWithdrawn,
    TierCreated,
    TierRewardTokenAdded,
    TierRewardTokenRemoved,
    TierUpdated,
    from_wei,
    hydrate_event,
)
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)

# ── Ports ───────────────────────────────────────────────────────
from .ports import (
    IBackgroundWorker,
    ICheckpointStore,
    IEventSource,
    ILedgerReader,
    IRecordStore,
    ISubscription,
)

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
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
from .retry import RetryPolicy

__all__ = [
    # Adapters
    "InMemoryEventSource",
    "InMemoryRecordStore",
    "InMemorySubscription",
    # Correlation
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "range_correlation_id",
    "set_correlation_id",
    # Domain
    "EVENT_TYPES",
    "NATURAL_KEYS",
    "Collection",
    "EventKind",
    "LedgerEvent",
    "RawLog",
    "RewardClaimed",
    "RewardTokenRegistered",
    "RewardTokenUpdated",
    "StakeWithdrawn",
    "Staked",
    "TierCreated",
    "TierRewardTokenAdded",
    "TierRewardTokenRemoved",
    "TierUpdated",
    "from_wei",
    "hydrate_event",
    # Instrumentation
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "set_hook_registry",
    # Ports
    "IBackgroundWorker",
    "ICheckpointStore",
    "IEventSource",
    "ILedgerReader",
    "IRecordStore",
    "ISubscription",
    # Primitives
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
    # Retry
    "RetryPolicy",
]
