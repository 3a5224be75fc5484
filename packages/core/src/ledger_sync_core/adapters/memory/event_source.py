"""InMemoryEventSource — list-backed fake ledger for unit tests and dry runs."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...domain.events import EventKind, LedgerEvent, RawLog, hydrate_event
from ...ports.event_source import IEventSource, ISubscription
from ...primitives.exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)


class InMemorySubscription(ISubscription):
    """Subscription handle fed by ``InMemoryEventSource.publish``."""

    def __init__(
        self,
        kinds: Sequence[EventKind],
        callback: Callable[[RawLog], Awaitable[None]],
    ) -> None:
        self.kinds = frozenset(kinds)
        self._callback = callback
        self._closed = asyncio.Event()
        self._error: BaseException | None = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def deliver(self, raw: RawLog) -> None:
        if self.closed or raw.kind not in self.kinds:
            return
        await self._callback(raw)

    def fail(self, error: BaseException) -> None:
        """Simulate the push stream dropping."""
        self._error = error
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()
        if self._error is not None:
            raise SourceUnavailableError(
                f"Subscription stream failed: {self._error}", operation="subscribe"
            ) from self._error

    async def close(self) -> None:
        self._closed.set()


class InMemoryEventSource(IEventSource):
    """In-memory implementation of ``IEventSource``.

    Logs carry their decoded arguments directly in ``RawLog.payload``.
    Every ``query_range`` call is recorded in ``queries`` for assertions.
    """

    def __init__(
        self,
        *,
        head: int = 0,
        tier_max_stakes: dict[int, int] | None = None,
        subscriptions: bool = True,
    ) -> None:
        self._logs: list[RawLog] = []
        self._head = head
        self._tier_max_stakes = dict(tier_max_stakes or {})
        self._subscriptions_enabled = subscriptions
        self.subscriptions: list[InMemorySubscription] = []
        self.queries: list[tuple[EventKind, int, int]] = []

    @property
    def supports_subscription(self) -> bool:
        return self._subscriptions_enabled

    def append(
        self,
        kind: EventKind,
        block_number: int,
        *,
        log_index: int = 0,
        transaction_hash: str | None = None,
        **args: Any,
    ) -> RawLog:
        """Record a log and advance the head to cover it."""
        raw = RawLog(
            kind=kind,
            block_number=block_number,
            log_index=log_index,
            transaction_hash=transaction_hash,
            payload=args,
        )
        self._logs.append(raw)
        self._head = max(self._head, block_number)
        return raw

    async def publish(self, raw: RawLog) -> None:
        """Record *raw* and push it to every open subscription."""
        self._logs.append(raw)
        self._head = max(self._head, raw.block_number)
        for subscription in list(self.subscriptions):
            await subscription.deliver(raw)

    def set_head(self, head: int) -> None:
        self._head = head

    def set_tier_max_stake(self, tier_id: int, max_stake: int) -> None:
        self._tier_max_stakes[tier_id] = max_stake

    async def current_head(self) -> int:
        return self._head

    async def query_range(
        self, kind: EventKind, from_position: int, to_position: int
    ) -> list[RawLog]:
        self.queries.append((kind, from_position, to_position))
        matched = [
            raw
            for raw in self._logs
            if raw.kind == kind and from_position <= raw.block_number <= to_position
        ]
        return sorted(matched, key=lambda raw: raw.sort_key)

    def decode(self, raw: RawLog) -> LedgerEvent:
        return hydrate_event(raw, raw.payload)

    async def tier_max_stake(self, tier_id: int) -> int:
        # Unknown tiers read as zero, like an unset contract struct.
        return self._tier_max_stakes.get(tier_id, 0)

    async def subscribe(
        self,
        kinds: Sequence[EventKind],
        callback: Callable[[RawLog], Awaitable[None]],
    ) -> InMemorySubscription:
        if not self._subscriptions_enabled:
            raise SourceUnavailableError(
                "Subscriptions are disabled", operation="subscribe"
            )
        subscription = InMemorySubscription(kinds, callback)
        self.subscriptions.append(subscription)
        logger.debug("Subscribed to %d event kinds", len(subscription.kinds))
        return subscription
