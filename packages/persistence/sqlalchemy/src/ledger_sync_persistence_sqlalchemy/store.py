"""SQLAlchemy record store implementing IRecordStore over the projected tables."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from ledger_sync_core.ports.record_store import IRecordStore

from .exceptions import SQLAlchemyRecordStoreError
from .models import Base

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sqlalchemy import ColumnElement, Executable, MetaData, Table
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    AsyncSessionFactory = Callable[[], AsyncSession]

logger = logging.getLogger(__name__)


class SQLAlchemyRecordStore(IRecordStore):
    """
    SQLAlchemy implementation of IRecordStore.

    Collections map one-to-one onto tables of *metadata* (the projected-record
    tables by default). Each call runs in its own session and commits before
    returning; driver errors surface as ``SQLAlchemyRecordStoreError``.
    """

    def __init__(
        self,
        session_factory: AsyncSessionFactory,
        *,
        metadata: MetaData = Base.metadata,
    ) -> None:
        self._session_factory = session_factory
        self._metadata = metadata

    def _table(self, collection: str) -> Table:
        table = self._metadata.tables.get(collection)
        if table is None:
            raise ValueError(f"Unknown collection: {collection!r}")
        return table

    def _criteria(
        self, table: Table, key: Mapping[str, Any]
    ) -> list[ColumnElement[bool]]:
        if not key:
            raise ValueError(f"Empty key for collection {table.name!r}")
        return [
            table.c[self._column(table, name)] == value for name, value in key.items()
        ]

    @staticmethod
    def _column(table: Table, name: str) -> str:
        if name not in table.c:
            raise ValueError(f"Unknown column {name!r} in collection {table.name!r}")
        return name

    async def _execute(
        self, operation: str, table: Table, stmt: Executable, *, commit: bool
    ) -> Any:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if commit:
                    await session.commit()
                    return getattr(result, "rowcount", 0)
                row = result.mappings().first()
                return dict(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise SQLAlchemyRecordStoreError(
                f"{operation} on {table.name!r} failed: {exc}"
            ) from exc

    async def find(
        self, collection: str, key: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        table = self._table(collection)
        stmt = select(table).where(*self._criteria(table, key)).limit(1)
        return await self._execute("find", table, stmt, commit=False)

    async def insert(self, collection: str, values: Mapping[str, Any]) -> None:
        table = self._table(collection)
        row = {self._column(table, name): value for name, value in values.items()}
        await self._execute("insert", table, insert(table).values(row), commit=True)
        logger.debug("Inserted into %s: %s", collection, row)

    async def update(
        self,
        collection: str,
        key: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> int:
        table = self._table(collection)
        changes = {self._column(table, name): value for name, value in values.items()}
        stmt = update(table).where(*self._criteria(table, key)).values(changes)
        return int(await self._execute("update", table, stmt, commit=True))

    async def delete(self, collection: str, key: Mapping[str, Any]) -> int:
        table = self._table(collection)
        stmt = delete(table).where(*self._criteria(table, key))
        return int(await self._execute("delete", table, stmt, commit=True))


async def create_tables(engine: AsyncEngine, metadata: MetaData = Base.metadata) -> None:
    """Create any missing projected-record tables (development and tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Ensured tables: %s", ", ".join(sorted(metadata.tables)))
