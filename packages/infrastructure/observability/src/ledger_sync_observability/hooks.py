"""Connect structured logging to the sync instrumentation hooks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ledger_sync_core.instrumentation import get_hook_registry

from .structured_logging import StructuredLoggingHook

if TYPE_CHECKING:
    from ledger_sync_core.instrumentation import HookRegistration

logger = logging.getLogger(__name__)

# Per-projector entries are left out by default: one line per event is noisy
# during a long catch-up.
DEFAULT_LOGGED_OPERATIONS: list[str] = [
    "sync.range",
    "checkpoint.save",
    "redis.checkpoint.save",
]


def install_structured_logging(
    *,
    operations: list[str] | None = None,
    priority: int = -100,
    enabled: bool = True,
    hook_logger: logging.Logger | None = None,
) -> HookRegistration:
    """Install the structured logging hook into the core hook registry."""
    registration = get_hook_registry().register(
        StructuredLoggingHook(hook_logger),
        priority=priority,
        operations=operations or DEFAULT_LOGGED_OPERATIONS,
        enabled=enabled,
    )
    logger.debug(
        "Structured logging installed for %s", ", ".join(registration.operations)
    )
    return registration
