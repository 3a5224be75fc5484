from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator


class EtherAmount(TypeDecorator[Decimal]):
    """
    Exact ether-denominated decimal.
    Uses NUMERIC(78, 18) on PostgreSQL and a decimal string elsewhere (SQLite
    has no exact decimal storage).
    """

    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect: Any) -> Any:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 18, asdecimal=True))
        return dialect.type_descriptor(String(100))

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        if value is None:
            return None
        if dialect.name == "postgresql":
            return Decimal(value)
        return str(Decimal(value))

    def process_result_value(self, value: Any, dialect: Any) -> Decimal | None:
        if value is None:
            return None
        return Decimal(str(value))
