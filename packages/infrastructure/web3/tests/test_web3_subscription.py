"""Tests for Web3LogSubscription."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes

from ledger_sync_core.domain.events import EventKind, RawLog
from ledger_sync_core.primitives.exceptions import SourceUnavailableError
from ledger_sync_web3.subscription import Web3LogSubscription

CONTRACT = "0x" + "33" * 20
TOPICS = {EventKind.STAKED: "0x" + "aa" * 32, EventKind.REWARD_CLAIMED: "0x" + "bb" * 32}


def _log(block_number: int, *, removed: bool = False) -> dict[str, Any]:
    return {
        "blockNumber": block_number,
        "logIndex": 0,
        "transactionHash": HexBytes(b"\x01" * 32),
        "removed": removed,
    }


def _socket(messages: list[dict[str, Any]], error: Exception | None = None) -> MagicMock:
    async def stream():
        for message in messages:
            yield message
        if error is not None:
            raise error
        await asyncio.Event().wait()

    w3 = MagicMock()
    w3.eth.subscribe = AsyncMock(side_effect=["0xa", "0xb"])
    w3.eth.unsubscribe = AsyncMock(return_value=True)
    w3.provider.disconnect = AsyncMock()
    w3.socket.process_subscriptions = MagicMock(return_value=stream())
    return w3


@pytest.mark.asyncio
async def test_dispatches_live_logs_by_subscription() -> None:
    received: list[RawLog] = []

    async def callback(raw: RawLog) -> None:
        received.append(raw)

    w3 = _socket(
        [
            {"subscription": "0xa", "result": _log(30)},
            {"subscription": "0xunknown", "result": _log(31)},
            {"subscription": "0xa", "result": _log(32, removed=True)},
            {"subscription": "0xb", "result": _log(33)},
        ]
    )
    subscription = Web3LogSubscription(w3, CONTRACT, TOPICS, callback)

    await subscription.start()
    for _ in range(20):
        if len(received) == 2:
            break
        await asyncio.sleep(0.01)
    await subscription.close()

    assert [(raw.kind, raw.block_number) for raw in received] == [
        (EventKind.STAKED, 30),
        (EventKind.REWARD_CLAIMED, 33),
    ]
    assert w3.eth.unsubscribe.await_count == 2
    w3.provider.disconnect.assert_awaited_once()


@pytest.mark.asyncio
async def test_stream_failure_surfaces_from_wait_closed() -> None:
    w3 = _socket([], error=ConnectionResetError("socket closed"))
    subscription = Web3LogSubscription(w3, CONTRACT, TOPICS, AsyncMock())

    await subscription.start()
    with pytest.raises(SourceUnavailableError):
        await asyncio.wait_for(subscription.wait_closed(), timeout=1.0)
    await subscription.close()


@pytest.mark.asyncio
async def test_close_stops_a_pending_stream() -> None:
    subscription = Web3LogSubscription(_socket([]), CONTRACT, TOPICS, AsyncMock())

    await subscription.start()
    await subscription.close()

    await asyncio.wait_for(subscription.wait_closed(), timeout=1.0)


@pytest.mark.asyncio
async def test_failed_subscribe_disconnects() -> None:
    w3 = _socket([])
    w3.eth.subscribe = AsyncMock(side_effect=OSError("connection refused"))
    subscription = Web3LogSubscription(w3, CONTRACT, TOPICS, AsyncMock())

    with pytest.raises(SourceUnavailableError):
        await subscription.start()
    w3.provider.disconnect.assert_awaited_once()
