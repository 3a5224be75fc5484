"""SQLAlchemy persistence for projected staking records."""

from __future__ import annotations

from .exceptions import SQLAlchemyRecordStoreError
from .models import (
    Base,
    RewardClaimRecord,
    RewardTokenRecord,
    StakeRecord,
    TierRecord,
    TierRewardTokenRecord,
)
from .store import SQLAlchemyRecordStore, create_tables
from .types import EtherAmount

__all__ = [
    "Base",
    "EtherAmount",
    "RewardClaimRecord",
    "RewardTokenRecord",
    "SQLAlchemyRecordStore",
    "SQLAlchemyRecordStoreError",
    "StakeRecord",
    "TierRecord",
    "TierRewardTokenRecord",
    "create_tables",
]
