"""IRecordStore protocol — keyed access to the projected relational store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class IRecordStore(Protocol):
    """Keyed reads and writes against the target store.

    ``collection`` is a table name (see ``Collection``); ``key`` maps column
    names to values and must identify rows by equality on every entry.
    Any failure other than "no such row" raises ``RecordStoreError``.
    """

    async def find(
        self, collection: str, key: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Return the row matching *key*, or None when absent."""
        ...

    async def insert(self, collection: str, values: Mapping[str, Any]) -> None:
        """Insert one row."""
        ...

    async def update(
        self,
        collection: str,
        key: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> int:
        """Set *values* on rows matching *key*; return number of rows touched."""
        ...

    async def delete(self, collection: str, key: Mapping[str, Any]) -> int:
        """Delete rows matching *key*; return number of rows removed."""
        ...
