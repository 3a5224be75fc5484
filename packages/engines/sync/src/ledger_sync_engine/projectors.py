"""Record projectors — one idempotent store mutation per event kind.

Creations look the natural key up first and do nothing when the row exists;
updates and deletes are unconditional and keyed, so replaying any event
leaves the store unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ledger_sync_core.domain.events import (
    EventKind,
    RewardClaimed,
    RewardTokenRegistered,
    RewardTokenUpdated,
    Staked,
    StakeWithdrawn,
    TierCreated,
    TierRewardTokenAdded,
    TierRewardTokenRemoved,
    TierUpdated,
)
from ledger_sync_core.domain.records import Collection, from_wei

from .registry import ProjectorRegistry

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ledger_sync_core.ports.event_source import ILedgerReader
    from ledger_sync_core.ports.record_store import IRecordStore

logger = logging.getLogger(__name__)


async def create_once(
    store: IRecordStore,
    collection: Collection,
    key: Mapping[str, Any],
    values: Mapping[str, Any],
) -> bool:
    """Insert ``key | values`` unless a row with *key* exists.

    Returns True when a row was inserted.
    """
    existing = await store.find(collection.value, key)
    if existing is not None:
        logger.debug(
            "%s %s already exists, skipping creation", collection.value, dict(key)
        )
        return False
    await store.insert(collection.value, {**key, **values})
    return True


async def project_tier_created(
    event: TierCreated, store: IRecordStore, reader: ILedgerReader
) -> None:
    key = {"id": str(event.tier_id)}
    if await store.find(Collection.TIERS.value, key) is not None:
        logger.debug("Tier %s already exists, skipping creation", event.tier_id)
        return
    # maxStake is not part of the event payload.
    max_stake = await reader.tier_max_stake(event.tier_id)
    await create_once(
        store,
        Collection.TIERS,
        key,
        {
            "name": event.name,
            "min_stake": from_wei(event.min_stake),
            "max_stake": from_wei(max_stake),
            "lockup_period": str(event.lockup_period),
            "apy": str(event.apy),
            "is_active": True,
        },
    )


async def project_tier_updated(
    event: TierUpdated, store: IRecordStore, reader: ILedgerReader
) -> None:
    max_stake = await reader.tier_max_stake(event.tier_id)
    await store.update(
        Collection.TIERS.value,
        {"id": str(event.tier_id)},
        {
            "name": event.name,
            "min_stake": from_wei(event.min_stake),
            "max_stake": from_wei(max_stake),
            "lockup_period": str(event.lockup_period),
            "apy": str(event.apy),
            "is_active": event.is_active,
        },
    )


async def project_staked(
    event: Staked, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await create_once(
        store,
        Collection.STAKES,
        {"id": str(event.stake_id)},
        {
            "owner": event.owner,
            "amount": from_wei(event.amount),
            "tier_id": str(event.tier_id),
            "start_time": str(event.start_time),
            "end_time": str(event.end_time),
            "has_withdrawn": False,
            "has_claimed_rewards": False,
        },
    )


async def project_stake_withdrawn(
    event: StakeWithdrawn, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    touched = await store.update(
        Collection.STAKES.value,
        {"id": str(event.stake_id)},
        {"has_withdrawn": True},
    )
    if not touched:
        logger.warning("StakeWithdrawn for unknown stake %s", event.stake_id)


async def project_reward_claimed(
    event: RewardClaimed, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await create_once(
        store,
        Collection.REWARD_CLAIMS,
        {
            "stake_id": str(event.stake_id),
            "owner": event.owner,
            "token_address": event.token,
        },
        {
            "amount": str(event.amount),
            "block_number": event.block_number,
            "transaction_hash": event.transaction_hash,
        },
    )
    # Also on redelivery: heals a crash between the two writes.
    await store.update(
        Collection.STAKES.value,
        {"id": str(event.stake_id)},
        {"has_claimed_rewards": True},
    )


async def project_reward_token_registered(
    event: RewardTokenRegistered, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await create_once(
        store,
        Collection.REWARD_TOKENS,
        {"address": event.token_address},
        {
            "symbol": event.symbol,
            "reward_rate": str(event.reward_rate),
            "is_active": True,
        },
    )


async def project_reward_token_updated(
    event: RewardTokenUpdated, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await store.update(
        Collection.REWARD_TOKENS.value,
        {"address": event.token_address},
        {"symbol": event.symbol, "reward_rate": str(event.reward_rate)},
    )


async def project_tier_reward_token_added(
    event: TierRewardTokenAdded, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await create_once(
        store,
        Collection.TIER_REWARD_TOKENS,
        {"tier_id": str(event.tier_id), "token_address": event.token_address},
        {},
    )


async def project_tier_reward_token_removed(
    event: TierRewardTokenRemoved, store: IRecordStore, reader: ILedgerReader
) -> None:
    del reader
    await store.delete(
        Collection.TIER_REWARD_TOKENS.value,
        {"tier_id": str(event.tier_id), "token_address": event.token_address},
    )


def default_registry() -> ProjectorRegistry:
    """Registry with a projector for every event kind."""
    registry = ProjectorRegistry()
    registry.register(EventKind.TIER_CREATED, project_tier_created)
    registry.register(EventKind.TIER_UPDATED, project_tier_updated)
    registry.register(EventKind.STAKED, project_staked)
    registry.register(EventKind.STAKE_WITHDRAWN, project_stake_withdrawn)
    registry.register(EventKind.REWARD_CLAIMED, project_reward_claimed)
    registry.register(
        EventKind.REWARD_TOKEN_REGISTERED, project_reward_token_registered
    )
    registry.register(EventKind.REWARD_TOKEN_UPDATED, project_reward_token_updated)
    registry.register(
        EventKind.TIER_REWARD_TOKEN_ADDED, project_tier_reward_token_added
    )
    registry.register(
        EventKind.TIER_REWARD_TOKEN_REMOVED, project_tier_reward_token_removed
    )
    registry.ensure_complete()
    return registry
