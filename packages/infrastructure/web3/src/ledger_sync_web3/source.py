"""Web3EventSource — IEventSource over an EVM JSON-RPC endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp
from eth_abi.exceptions import DecodingError
from eth_utils import encode_hex, event_abi_to_log_topic
from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider
from web3.exceptions import Web3Exception

from ledger_sync_core.domain.events import EventKind, hydrate_event
from ledger_sync_core.ports.event_source import IEventSource
from ledger_sync_core.primitives.exceptions import (
    EventDecodingError,
    SourceUnavailableError,
)

from .abi import STAKING_ABI, find_entry
from .exceptions import translate_transport_errors
from .logs import to_raw_log
from .subscription import Web3LogSubscription

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from web3.contract import AsyncContract

    from ledger_sync_core.domain.events import LedgerEvent, RawLog

    WebSocketConnector = Callable[[str], Awaitable[AsyncWeb3]]

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


async def connect_websocket(url: str) -> AsyncWeb3:
    """Open a persistent WebSocket connection."""
    return await AsyncWeb3(WebSocketProvider(url))


def _output_path(function_abi: dict[str, Any], name: str) -> tuple[int, ...]:
    outputs = function_abi.get("outputs", [])
    for index, output in enumerate(outputs):
        if output.get("name") == name:
            return (index,)
    if len(outputs) == 1 and outputs[0].get("type") == "tuple":
        for index, component in enumerate(outputs[0].get("components", [])):
            if component.get("name") == name:
                return (0, index)
    raise ValueError(f"{function_abi.get('name')} has no output named {name!r}")


class Web3EventSource(IEventSource):
    """
    Event source backed by the staking contract on an EVM chain.

    Range queries use ``eth_getLogs`` filtered by contract address and the
    kind's topic; live delivery needs a WebSocket endpoint (``ws_url``).
    Transport failures surface as ``SourceUnavailableError``.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        contract: AsyncContract,
        *,
        ws_url: str | None = None,
        connect_ws: WebSocketConnector | None = None,
    ) -> None:
        self._w3 = w3
        self._contract = contract
        self._address = contract.address
        self._ws_url = ws_url
        self._connect_ws = connect_ws or connect_websocket
        abi = list(contract.abi)
        self._topics = {
            kind: encode_hex(
                event_abi_to_log_topic(find_entry(abi, "event", kind.value))
            )
            for kind in EventKind
        }
        self._max_stake_path = _output_path(
            find_entry(abi, "function", "tiers"), "maxStake"
        )

    @classmethod
    def from_url(
        cls,
        rpc_url: str,
        address: str,
        abi: list[dict[str, Any]] | None = None,
        *,
        ws_url: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> Web3EventSource:
        """Build a source on an HTTP provider; the ABI defaults to the bundled one."""
        w3 = AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            )
        )
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=abi or STAKING_ABI,
        )
        return cls(w3, contract, ws_url=ws_url)

    @property
    def address(self) -> str:
        return self._address

    @property
    def supports_subscription(self) -> bool:
        return self._ws_url is not None

    def topic_for(self, kind: EventKind) -> str:
        return self._topics[kind]

    async def current_head(self) -> int:
        with translate_transport_errors("eth_blockNumber"):
            return int(await self._w3.eth.block_number)

    async def query_range(
        self, kind: EventKind, from_position: int, to_position: int
    ) -> list[RawLog]:
        with translate_transport_errors("eth_getLogs"):
            logs = await self._w3.eth.get_logs(
                {
                    "fromBlock": from_position,
                    "toBlock": to_position,
                    "address": self._address,
                    "topics": [self._topics[kind]],
                }
            )
        raws = [to_raw_log(kind, log) for log in logs if not log.get("removed", False)]
        logger.debug(
            "Fetched %d %s logs in %s-%s",
            len(raws),
            kind.value,
            from_position,
            to_position,
        )
        return sorted(raws, key=lambda raw: raw.sort_key)

    def decode(self, raw: RawLog) -> LedgerEvent:
        event = getattr(self._contract.events, raw.kind.value)()
        try:
            processed = event.process_log(raw.payload)
        except (Web3Exception, DecodingError, KeyError, TypeError, ValueError) as exc:
            raise EventDecodingError(
                f"Cannot decode {raw.kind.value} log at block {raw.block_number} "
                f"(log {raw.log_index}): {exc}",
                kind=raw.kind.value,
                block_number=raw.block_number,
                log_index=raw.log_index,
            ) from exc
        return hydrate_event(raw, dict(processed["args"]))

    async def tier_max_stake(self, tier_id: int) -> int:
        with translate_transport_errors("tiers"):
            result = await self._contract.functions.tiers(tier_id).call()
        value = result
        if len(self._max_stake_path) > 1 or isinstance(result, (list, tuple)):
            for index in self._max_stake_path:
                value = value[index]
        return int(value)

    async def subscribe(
        self,
        kinds: Sequence[EventKind],
        callback: Callable[[RawLog], Awaitable[None]],
    ) -> Web3LogSubscription:
        if self._ws_url is None:
            raise SourceUnavailableError(
                "No WebSocket endpoint configured", operation="subscribe"
            )
        with translate_transport_errors("connect"):
            w3 = await self._connect_ws(self._ws_url)
        subscription = Web3LogSubscription(
            w3, self._address, {kind: self._topics[kind] for kind in kinds}, callback
        )
        await subscription.start()
        return subscription

    async def aclose(self) -> None:
        """Release the HTTP provider's cached sessions."""
        await self._w3.provider.disconnect()
