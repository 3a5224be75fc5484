"""Exceptions for the SQLAlchemy persistence layer."""

from __future__ import annotations

from ledger_sync_core.primitives.exceptions import RecordStoreError


class SQLAlchemyRecordStoreError(RecordStoreError):
    """Raised when a statement against the projected-record tables fails."""


__all__: list[str] = [
    "SQLAlchemyRecordStoreError",
]
