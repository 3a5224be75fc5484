"""Web3LogSubscription — live logs over ``eth_subscribe`` on a WebSocket provider."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ledger_sync_core.ports.event_source import ISubscription
from ledger_sync_core.primitives.exceptions import SourceUnavailableError

from .exceptions import translate_transport_errors
from .logs import to_raw_log

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from web3 import AsyncWeb3

    from ledger_sync_core.domain.events import EventKind, RawLog

logger = logging.getLogger(__name__)


class Web3LogSubscription(ISubscription):
    """One ``logs`` subscription per event kind, multiplexed on one socket.

    Messages are dispatched to the callback one at a time, in arrival order.
    Logs flagged ``removed`` (chain reorganisations) are dropped.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        address: str,
        topics: Mapping[EventKind, str],
        callback: Callable[[RawLog], Awaitable[None]],
    ) -> None:
        self._w3 = w3
        self._address = address
        self._topics = dict(topics)
        self._callback = callback
        self._kinds_by_id: dict[str, EventKind] = {}
        self._dispatch_lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self._closing = False
        self._error: BaseException | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Register the subscriptions and begin dispatching."""
        try:
            with translate_transport_errors("eth_subscribe"):
                for kind, topic in self._topics.items():
                    subscription_id = await self._w3.eth.subscribe(
                        "logs", {"address": self._address, "topics": [topic]}
                    )
                    self._kinds_by_id[str(subscription_id)] = kind
        except SourceUnavailableError:
            await self._disconnect()
            raise
        logger.info("Subscribed to %d log filters", len(self._kinds_by_id))
        self._task = asyncio.create_task(self._dispatch(), name="web3-log-dispatch")

    async def _dispatch(self) -> None:
        try:
            async for message in self._w3.socket.process_subscriptions():
                async with self._dispatch_lock:
                    if self._closing:
                        break
                    await self._handle(message)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            # Surfaced to the engine through wait_closed().
            self._error = exc
        finally:
            self._closed.set()

    async def _handle(self, message: Mapping[str, Any]) -> None:
        kind = self._kinds_by_id.get(str(message.get("subscription")))
        if kind is None:
            return
        log = message["result"]
        if log.get("removed", False):
            logger.warning(
                "Ignoring removed %s log at block %s",
                kind.value,
                log.get("blockNumber"),
            )
            return
        await self._callback(to_raw_log(kind, log))

    async def wait_closed(self) -> None:
        await self._closed.wait()
        if self._error is not None:
            raise SourceUnavailableError(
                f"Log subscription failed: {self._error}", operation="subscribe"
            ) from self._error

    async def close(self) -> None:
        if self._closing:
            return
        async with self._dispatch_lock:
            self._closing = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._closed.set()
        for subscription_id in self._kinds_by_id:
            try:
                await self._w3.eth.unsubscribe(subscription_id)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Unsubscribe %s failed: %s", subscription_id, exc)
        await self._disconnect()

    async def _disconnect(self) -> None:
        try:
            await self._w3.provider.disconnect()
        except Exception as exc:  # noqa: BLE001
            logger.debug("WebSocket disconnect failed: %s", exc)
