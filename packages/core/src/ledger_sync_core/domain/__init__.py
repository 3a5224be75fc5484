"""Domain layer: event catalog and projected record definitions."""

from __future__ import annotations

from .events import (
    EVENT_TYPES,
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
    hydrate_event,
)
from .records import NATURAL_KEYS, WEI_PER_ETHER, Collection, from_wei

__all__ = [
    "EVENT_TYPES",
    "NATURAL_KEYS",
    "WEI_PER_ETHER",
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
]
