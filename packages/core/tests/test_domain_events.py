from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledger_sync_core.domain.events import (
    EVENT_TYPES,
    EventKind,
    RawLog,
    Staked,
    StakeWithdrawn,
    TierUpdated,
    hydrate_event,
)
from ledger_sync_core.domain.records import NATURAL_KEYS, Collection, from_wei
from ledger_sync_core.primitives.exceptions import (
    CheckpointError,
    CheckpointRegressionError,
    EventDecodingError,
    FatalSyncError,
    RetryableError,
    SourceUnavailableError,
)

OWNER = "0x" + "11" * 20


def test_catalog_covers_every_kind_in_processing_order() -> None:
    assert list(EVENT_TYPES) == list(EventKind)
    assert [kind.value for kind in EventKind][:3] == [
        "TierCreated",
        "TierUpdated",
        "Staked",
    ]
    for kind, model in EVENT_TYPES.items():
        assert model.kind is kind


def test_hydrate_accepts_ledger_argument_names() -> None:
    raw = RawLog(
        kind=EventKind.STAKED, block_number=12, log_index=3, transaction_hash="0xab"
    )
    event = hydrate_event(
        raw,
        {
            "stakeId": 7,
            "owner": OWNER,
            "amount": 10**18,
            "tierId": 1,
            "startTime": 100,
            "endTime": 200,
        },
    )
    assert isinstance(event, Staked)
    assert event.stake_id == 7
    assert event.sort_key == (12, 3)
    assert event.transaction_hash == "0xab"


def test_hydrate_rejects_mismatched_payload() -> None:
    raw = RawLog(kind=EventKind.STAKED, block_number=12, log_index=3)
    with pytest.raises(EventDecodingError) as exc_info:
        hydrate_event(raw, {"stakeId": -1, "owner": "nobody"})
    assert exc_info.value.kind == "Staked"
    assert exc_info.value.block_number == 12
    assert exc_info.value.log_index == 3


def test_withdrawal_needs_only_stake_id() -> None:
    raw = RawLog(kind=EventKind.STAKE_WITHDRAWN, block_number=1)
    event = hydrate_event(raw, {"stakeId": 9})
    assert isinstance(event, StakeWithdrawn)
    assert event.owner is None


def test_events_are_immutable() -> None:
    event = TierUpdated(
        block_number=1,
        tier_id=1,
        name="Gold",
        min_stake=1,
        lockup_period=1,
        apy=1,
        is_active=True,
    )
    with pytest.raises(ValidationError):
        event.name = "Silver"  # type: ignore[misc]


def test_natural_keys_cover_every_collection() -> None:
    assert set(NATURAL_KEYS) == set(Collection)
    assert NATURAL_KEYS[Collection.REWARD_CLAIMS] == ("stake_id", "owner", "token_address")


def test_from_wei_is_exact() -> None:
    assert from_wei(1) == Decimal("0.000000000000000001")
    assert from_wei(123456789123456789123456789) == Decimal(
        "123456789.123456789123456789"
    )


@pytest.mark.parametrize(
    "wei",
    [
        123456789012345678901234567890123,
        2**256 - 1,
    ],
)
def test_from_wei_keeps_every_digit_of_large_amounts(wei: int) -> None:
    digits = str(wei)
    expected = Decimal(f"{digits[:-18]}.{digits[-18:]}")

    ether = from_wei(wei)

    assert ether == expected
    assert ether.as_tuple().digits == tuple(int(d) for d in digits)


def test_error_taxonomy() -> None:
    assert issubclass(SourceUnavailableError, RetryableError)
    assert issubclass(CheckpointError, RetryableError)
    assert issubclass(CheckpointRegressionError, FatalSyncError)
    assert not issubclass(EventDecodingError, RetryableError)
    err = CheckpointRegressionError(1500, 1200)
    assert "1500" in str(err)
    assert "1200" in str(err)
