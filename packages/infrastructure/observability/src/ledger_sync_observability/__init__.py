"""Observability — structured logging of sync operations."""

from __future__ import annotations

from .hooks import DEFAULT_LOGGED_OPERATIONS, install_structured_logging
from .structured_logging import StructuredLoggingHook

__all__ = [
    "DEFAULT_LOGGED_OPERATIONS",
    "StructuredLoggingHook",
    "install_structured_logging",
]
