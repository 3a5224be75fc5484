"""Event source protocols: range queries, decoding, push subscription."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from ..domain.events import EventKind, LedgerEvent, RawLog

    LogCallback = Callable[[RawLog], Awaitable[None]]


@runtime_checkable
class ISubscription(Protocol):
    """Handle for an active push subscription."""

    async def wait_closed(self) -> None:
        """Return when the subscription closes cleanly.

        Raises ``SourceUnavailableError`` if the stream fails.
        """
        ...

    async def close(self) -> None:
        """Stop dispatching, detach from the source.

        A callback already running is allowed to finish.
        """
        ...


@runtime_checkable
class ILedgerReader(Protocol):
    """Supplemental synchronous reads projectors may need."""

    async def tier_max_stake(self, tier_id: int) -> int:
        """Return the tier's ``maxStake`` (wei), which events do not carry."""
        ...


@runtime_checkable
class IEventSource(ILedgerReader, Protocol):
    """Range-scoped access to the remote ledger's events.

    Transport failures surface as ``SourceUnavailableError``; payloads that do
    not match their kind's schema surface from ``decode`` as
    ``EventDecodingError``.
    """

    @property
    def supports_subscription(self) -> bool:
        """True when ``subscribe`` can deliver live events."""
        ...

    async def current_head(self) -> int:
        """Latest finalized position on the ledger."""
        ...

    async def query_range(
        self, kind: EventKind, from_position: int, to_position: int
    ) -> Sequence[RawLog]:
        """Logs of *kind* in the inclusive range, ordered by (block, log index).

        Callers keep ranges within the source's per-call span limit.
        """
        ...

    def decode(self, raw: RawLog) -> LedgerEvent:
        """Decode a delivered log into its payload model."""
        ...

    async def subscribe(
        self, kinds: Sequence[EventKind], callback: LogCallback
    ) -> ISubscription:
        """Push every new log of *kinds* to *callback*, one at a time."""
        ...
