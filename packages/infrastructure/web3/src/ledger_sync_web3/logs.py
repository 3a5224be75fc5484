from __future__ import annotations

from typing import TYPE_CHECKING, Any

from eth_utils import encode_hex

from ledger_sync_core.domain.events import RawLog

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ledger_sync_core.domain.events import EventKind


def _as_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)


def _as_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    return str(value)


def to_raw_log(kind: EventKind, log: Mapping[str, Any]) -> RawLog:
    """Wrap a JSON-RPC log entry; decoding happens later in ``decode``."""
    tx_hash = log.get("transactionHash")
    return RawLog(
        kind=kind,
        block_number=_as_int(log["blockNumber"]),
        log_index=_as_int(log.get("logIndex", 0)),
        transaction_hash=_as_hex(tx_hash) if tx_hash is not None else None,
        payload=dict(log),
    )
