"""Tests for Web3EventSource."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from eth_abi import encode as abi_encode
from eth_utils import encode_hex, event_abi_to_log_topic
from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from ledger_sync_core.domain.events import EventKind, RawLog, Staked
from ledger_sync_core.primitives.exceptions import (
    EventDecodingError,
    SourceUnavailableError,
)
from ledger_sync_web3.abi import STAKING_ABI, find_entry
from ledger_sync_web3.logs import to_raw_log
from ledger_sync_web3.source import Web3EventSource
from ledger_sync_web3.subscription import Web3LogSubscription

CONTRACT = "0x" + "33" * 20
OWNER = "0x" + "11" * 20


def _topic(name: str) -> HexBytes:
    return HexBytes(event_abi_to_log_topic(find_entry(STAKING_ABI, "event", name)))


def _staked_log(
    block_number: int = 1200, log_index: int = 0, *, data: bytes | None = None
) -> dict[str, Any]:
    if data is None:
        data = abi_encode(
            ["uint256", "uint256", "uint256", "uint256"],
            [2 * 10**18, 1, 1_700_000_000, 1_700_086_400],
        )
    return {
        "address": CONTRACT,
        "blockHash": HexBytes(b"\x01" * 32),
        "blockNumber": block_number,
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": HexBytes(b"\xab" * 32),
        "topics": [
            _topic("Staked"),
            HexBytes(abi_encode(["uint256"], [7])),
            HexBytes(abi_encode(["address"], [OWNER])),
        ],
        "data": HexBytes(data),
        "removed": False,
    }


async def _value(value: Any) -> Any:
    return value


@pytest.fixture
def contract() -> Any:
    w3 = AsyncWeb3(AsyncHTTPProvider("http://127.0.0.1:8545"))
    return w3.eth.contract(address=CONTRACT, abi=STAKING_ABI)


@pytest.fixture
def rpc() -> MagicMock:
    w3 = MagicMock()
    w3.eth.get_logs = AsyncMock(return_value=[])
    return w3


@pytest.fixture
def source(rpc: MagicMock, contract: Any) -> Web3EventSource:
    return Web3EventSource(rpc, contract)


@pytest.mark.asyncio
async def test_current_head(source: Web3EventSource, rpc: MagicMock) -> None:
    rpc.eth.block_number = _value(1500)
    assert await source.current_head() == 1500


@pytest.mark.asyncio
async def test_query_range_filters_by_address_and_topic(
    source: Web3EventSource, rpc: MagicMock
) -> None:
    removed = {**_staked_log(1100), "removed": True}
    rpc.eth.get_logs.return_value = [
        _staked_log(1300, 1),
        _staked_log(1200, 4),
        removed,
        _staked_log(1300, 0),
    ]

    logs = await source.query_range(EventKind.STAKED, 1001, 1500)

    rpc.eth.get_logs.assert_awaited_once_with(
        {
            "fromBlock": 1001,
            "toBlock": 1500,
            "address": CONTRACT,
            "topics": [encode_hex(_topic("Staked"))],
        }
    )
    assert [log.sort_key for log in logs] == [(1200, 4), (1300, 0), (1300, 1)]
    assert logs[0].transaction_hash == "0x" + "ab" * 32


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        aiohttp.ClientConnectionError("connection refused"),
        Web3Exception("429 Too Many Requests"),
        TimeoutError(),
    ],
)
async def test_transport_errors_are_retryable(
    source: Web3EventSource, rpc: MagicMock, error: Exception
) -> None:
    rpc.eth.get_logs.side_effect = error
    with pytest.raises(SourceUnavailableError) as exc_info:
        await source.query_range(EventKind.STAKED, 1, 10)
    assert exc_info.value.operation == "eth_getLogs"


def test_decode_hydrates_payload_model(source: Web3EventSource) -> None:
    event = source.decode(to_raw_log(EventKind.STAKED, _staked_log(1200, 3)))

    assert isinstance(event, Staked)
    assert event.stake_id == 7
    assert event.owner.lower() == OWNER
    assert event.amount == 2 * 10**18
    assert event.block_number == 1200
    assert event.log_index == 3


def test_decode_rejects_truncated_data(source: Web3EventSource) -> None:
    raw = to_raw_log(EventKind.STAKED, _staked_log(data=b"\x00" * 10))
    with pytest.raises(EventDecodingError) as exc_info:
        source.decode(raw)
    assert exc_info.value.kind == "Staked"
    assert exc_info.value.block_number == 1200


def test_decode_rejects_foreign_topic(source: Web3EventSource) -> None:
    log = _staked_log()
    raw = RawLog(kind=EventKind.TIER_CREATED, block_number=1200, payload=log)
    with pytest.raises(EventDecodingError):
        source.decode(raw)


@pytest.mark.asyncio
async def test_tier_max_stake_picks_named_output(rpc: MagicMock) -> None:
    contract = MagicMock()
    contract.address = CONTRACT
    contract.abi = STAKING_ABI
    contract.functions.tiers.return_value.call = AsyncMock(
        return_value=["Gold", 10**18, 50 * 10**18, 86400, 1200, True]
    )
    source = Web3EventSource(rpc, contract)

    assert await source.tier_max_stake(1) == 50 * 10**18
    contract.functions.tiers.assert_called_once_with(1)


def test_abi_without_required_events_is_rejected(rpc: MagicMock) -> None:
    contract = MagicMock()
    contract.address = CONTRACT
    contract.abi = [entry for entry in STAKING_ABI if entry.get("name") != "Staked"]
    with pytest.raises(ValueError, match="Staked"):
        Web3EventSource(rpc, contract)


@pytest.mark.asyncio
async def test_subscribe_requires_websocket_endpoint(source: Web3EventSource) -> None:
    assert source.supports_subscription is False
    with pytest.raises(SourceUnavailableError):
        await source.subscribe([EventKind.STAKED], AsyncMock())


@pytest.mark.asyncio
async def test_subscribe_opens_one_filter_per_kind(rpc: MagicMock, contract: Any) -> None:
    ws = MagicMock()
    ws.eth.subscribe = AsyncMock(side_effect=["0xa", "0xb"])
    ws.eth.unsubscribe = AsyncMock(return_value=True)
    ws.provider.disconnect = AsyncMock()

    async def _empty_stream():
        return
        yield

    ws.socket.process_subscriptions = MagicMock(return_value=_empty_stream())
    connect = AsyncMock(return_value=ws)
    source = Web3EventSource(rpc, contract, ws_url="ws://node", connect_ws=connect)

    subscription = await source.subscribe(
        [EventKind.STAKED, EventKind.REWARD_CLAIMED], AsyncMock()
    )
    await subscription.close()

    assert isinstance(subscription, Web3LogSubscription)
    connect.assert_awaited_once_with("ws://node")
    first_filter = ws.eth.subscribe.await_args_list[0].args
    assert first_filter == (
        "logs",
        {"address": CONTRACT, "topics": [encode_hex(_topic("Staked"))]},
    )
    assert ws.eth.unsubscribe.await_count == 2
    ws.provider.disconnect.assert_awaited_once()
