"""InMemoryRecordStore — dict-backed fake of the relational target store."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from ...domain.records import NATURAL_KEYS, Collection
from ...ports.record_store import IRecordStore
from ...primitives.exceptions import RecordStoreError

if TYPE_CHECKING:
    from collections.abc import Mapping


def _matches(row: Mapping[str, Any], key: Mapping[str, Any]) -> bool:
    return all(row.get(column) == value for column, value in key.items())


class InMemoryRecordStore(IRecordStore):
    """In-memory implementation of ``IRecordStore``.

    Enforces the natural-key uniqueness the relational schema declares, so a
    non-idempotent projector fails here the same way it would in the database.
    """

    def __init__(self) -> None:
        self._rows: dict[str, list[dict[str, Any]]] = {}

    async def find(
        self, collection: str, key: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        for row in self._rows.get(collection, []):
            if _matches(row, key):
                return copy.deepcopy(row)
        return None

    async def insert(self, collection: str, values: Mapping[str, Any]) -> None:
        rows = self._rows.setdefault(collection, [])
        natural_key = self._natural_key(collection, values)
        if natural_key and any(_matches(row, natural_key) for row in rows):
            raise RecordStoreError(
                f"Duplicate key {natural_key!r} in collection {collection!r}"
            )
        rows.append(dict(values))

    async def update(
        self,
        collection: str,
        key: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> int:
        touched = 0
        for row in self._rows.get(collection, []):
            if _matches(row, key):
                row.update(values)
                touched += 1
        return touched

    async def delete(self, collection: str, key: Mapping[str, Any]) -> int:
        rows = self._rows.get(collection, [])
        kept = [row for row in rows if not _matches(row, key)]
        self._rows[collection] = kept
        return len(rows) - len(kept)

    @staticmethod
    def _natural_key(
        collection: str, values: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        try:
            columns = NATURAL_KEYS[Collection(collection)]
        except ValueError:
            return None
        return {column: values.get(column) for column in columns}

    def rows(self, collection: str) -> list[dict[str, Any]]:
        """Snapshot of a collection's rows (for tests)."""
        return copy.deepcopy(self._rows.get(collection, []))

    def clear(self) -> None:
        """Drop all rows (for tests)."""
        self._rows.clear()
