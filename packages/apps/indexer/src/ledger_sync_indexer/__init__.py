"""ledger-sync indexer application: settings, wiring and CLI."""

from __future__ import annotations

from .bootstrap import Application, build_application, configure_logging
from .settings import CheckpointBackend, Settings

__all__ = [
    "Application",
    "CheckpointBackend",
    "Settings",
    "build_application",
    "configure_logging",
]
