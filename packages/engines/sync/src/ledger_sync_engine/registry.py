"""ProjectorRegistry — maps each event kind to exactly one projector."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from ledger_sync_core.domain.events import EVENT_TYPES, EventKind
from ledger_sync_core.primitives.exceptions import HandlerError, ProjectionError

if TYPE_CHECKING:
    from ledger_sync_core.domain.events import LedgerEvent
    from ledger_sync_core.ports.event_source import ILedgerReader
    from ledger_sync_core.ports.record_store import IRecordStore

Projector: TypeAlias = Callable[[Any, "IRecordStore", "ILedgerReader"], Awaitable[None]]


class ProjectorRegistry:
    """Closed dispatch table from ``EventKind`` to projector function."""

    def __init__(self) -> None:
        self._by_kind: dict[EventKind, Projector] = {}

    def register(self, kind: EventKind, projector: Projector) -> None:
        """Register the projector for *kind*; a second registration is an error."""
        if kind in self._by_kind:
            raise HandlerError(f"A projector is already registered for {kind.value}")
        self._by_kind[kind] = projector

    def projector_for(self, kind: EventKind) -> Projector:
        try:
            return self._by_kind[kind]
        except KeyError:
            raise ProjectionError(f"No projector registered for {kind.value}") from None

    def kinds(self) -> list[EventKind]:
        """Registered kinds in declared processing order."""
        return [kind for kind in EventKind if kind in self._by_kind]

    def ensure_complete(self) -> None:
        """Raise ``ProjectionError`` unless every event kind has a projector."""
        missing = [kind.value for kind in EventKind if kind not in self._by_kind]
        if missing:
            raise ProjectionError(
                f"No projector registered for: {', '.join(missing)}"
            )

    async def apply(
        self, event: LedgerEvent, store: IRecordStore, reader: ILedgerReader
    ) -> None:
        """Run the projector for ``event.kind``."""
        if not isinstance(event, EVENT_TYPES[event.kind]):
            raise ProjectionError(
                f"{type(event).__name__} is not a {event.kind.value} payload"
            )
        await self.projector_for(event.kind)(event, store, reader)
