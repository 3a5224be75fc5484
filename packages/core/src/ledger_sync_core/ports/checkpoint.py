"""ICheckpointStore protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ICheckpointStore(Protocol):
    """Durable single-key record of the highest fully applied ledger position.

    ``save`` must be atomic: a crash during a save leaves the previous value
    readable, and once ``save`` returns, ``load`` returns that value or later.
    """

    async def load(self) -> int | None:
        """Return last committed position; None if never saved."""
        ...

    async def save(self, position: int) -> None:
        """Persist position after a fully applied range."""
        ...
