"""StructuredLoggingHook — one JSON log entry per instrumented sync operation."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

from ledger_sync_core.correlation import get_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_log = logging.getLogger(__name__)


class StructuredLoggingHook:
    """Implements the InstrumentationHook protocol.

    Emits operation, outcome, duration_ms, correlation_id and the operation's
    attributes as a JSON object.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _log

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        start = time.monotonic()
        outcome = "success"
        try:
            return await next_handler()
        except Exception:  # noqa: BLE001
            outcome = "error"
            raise
        finally:
            try:
                duration_ms = (time.monotonic() - start) * 1000
                entry = {
                    "operation": operation,
                    "outcome": outcome,
                    "duration_ms": round(duration_ms, 2),
                    "correlation_id": get_correlation_id()
                    or attributes.get("correlation_id"),
                    "attributes": {
                        key: value
                        for key, value in attributes.items()
                        if key != "correlation_id"
                    },
                }
                self._log.info(json.dumps(entry, default=str))
            except Exception:  # noqa: BLE001
                _log.debug("Failed to emit structured log entry", exc_info=True)
