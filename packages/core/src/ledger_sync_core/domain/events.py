"""Ledger event catalog: a closed set of kinds, one payload model per kind.

Field names are snake_case; the ledger's own camelCase argument names are
accepted as aliases so decoded log arguments validate directly.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from ..primitives.exceptions import EventDecodingError

Address = Annotated[str, StringConstraints(pattern=r"^0x[0-9a-fA-F]{40}$")]
Uint = Annotated[int, Field(ge=0)]


class EventKind(str, enum.Enum):
    """Every event kind the indexer consumes, in declared processing order."""

    TIER_CREATED = "TierCreated"
    TIER_UPDATED = "TierUpdated"
    STAKED = "Staked"
    STAKE_WITHDRAWN = "StakeWithdrawn"
    REWARD_CLAIMED = "RewardClaimed"
    REWARD_TOKEN_REGISTERED = "RewardTokenRegistered"
    REWARD_TOKEN_UPDATED = "RewardTokenUpdated"
    TIER_REWARD_TOKEN_ADDED = "TierRewardTokenAdded"
    TIER_REWARD_TOKEN_REMOVED = "TierRewardTokenRemoved"


class LedgerEvent(BaseModel):
    """Base class for decoded ledger events.

    Events are immutable. ``block_number`` is the ledger position and
    ``log_index`` the emission order inside the block.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    kind: ClassVar[EventKind]

    block_number: Uint
    log_index: Uint = 0
    transaction_hash: str | None = None

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.block_number, self.log_index)


class TierCreated(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.TIER_CREATED

    tier_id: Uint = Field(alias="tierId")
    name: str
    min_stake: Uint = Field(alias="minStake")
    lockup_period: Uint = Field(alias="lockupPeriod")
    apy: Uint


class TierUpdated(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.TIER_UPDATED

    tier_id: Uint = Field(alias="tierId")
    name: str
    min_stake: Uint = Field(alias="minStake")
    lockup_period: Uint = Field(alias="lockupPeriod")
    apy: Uint
    is_active: bool = Field(alias="isActive")


class Staked(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.STAKED

    stake_id: Uint = Field(alias="stakeId")
    owner: Address
    amount: Uint
    tier_id: Uint = Field(alias="tierId")
    start_time: Uint = Field(alias="startTime")
    end_time: Uint = Field(alias="endTime")


class StakeWithdrawn(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.STAKE_WITHDRAWN

    stake_id: Uint = Field(alias="stakeId")
    owner: Address | None = None
    amount: Uint | None = None


class RewardClaimed(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.REWARD_CLAIMED

    stake_id: Uint = Field(alias="stakeId")
    owner: Address
    token: Address
    amount: Uint


class RewardTokenRegistered(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.REWARD_TOKEN_REGISTERED

    token_address: Address = Field(alias="tokenAddress")
    symbol: str
    reward_rate: Uint = Field(alias="rewardRate")


class RewardTokenUpdated(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.REWARD_TOKEN_UPDATED

    token_address: Address = Field(alias="tokenAddress")
    symbol: str
    reward_rate: Uint = Field(alias="rewardRate")


class TierRewardTokenAdded(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.TIER_REWARD_TOKEN_ADDED

    tier_id: Uint = Field(alias="tierId")
    token_address: Address = Field(alias="tokenAddress")


class TierRewardTokenRemoved(LedgerEvent):
    kind: ClassVar[EventKind] = EventKind.TIER_REWARD_TOKEN_REMOVED

    tier_id: Uint = Field(alias="tierId")
    token_address: Address = Field(alias="tokenAddress")


def _build_catalog(
    classes: Iterable[type[LedgerEvent]],
) -> Mapping[EventKind, type[LedgerEvent]]:
    catalog: dict[EventKind, type[LedgerEvent]] = {}
    for cls in classes:
        if cls.kind in catalog:
            raise TypeError(f"Duplicate payload model for {cls.kind.value}")
        catalog[cls.kind] = cls
    missing = [kind.value for kind in EventKind if kind not in catalog]
    if missing:
        raise TypeError(f"No payload model for event kinds: {', '.join(missing)}")
    return MappingProxyType(catalog)


EVENT_TYPES = _build_catalog(
    (
        TierCreated,
        TierUpdated,
        Staked,
        StakeWithdrawn,
        RewardClaimed,
        RewardTokenRegistered,
        RewardTokenUpdated,
        TierRewardTokenAdded,
        TierRewardTokenRemoved,
    )
)


class RawLog(BaseModel):
    """An undecoded delivery from the event source.

    ``payload`` is adapter-specific: the raw JSON-RPC log for the web3 source,
    the plain argument mapping for the in-memory source.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    block_number: Uint
    log_index: Uint = 0
    transaction_hash: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.block_number, self.log_index)


def hydrate_event(raw: RawLog, args: Mapping[str, Any]) -> LedgerEvent:
    """Validate decoded *args* into the payload model for ``raw.kind``."""
    model = EVENT_TYPES[raw.kind]
    data = dict(args)
    data.update(
        block_number=raw.block_number,
        log_index=raw.log_index,
        transaction_hash=raw.transaction_hash,
    )
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise EventDecodingError(
            f"{raw.kind.value} at block {raw.block_number} "
            f"(log {raw.log_index}) does not match its schema: "
            f"{exc.error_count()} validation error(s)",
            kind=raw.kind.value,
            block_number=raw.block_number,
            log_index=raw.log_index,
        ) from exc
