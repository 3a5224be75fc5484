"""Checkpoint stores: in-memory for tests, JSON file for single-host deployments."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from ledger_sync_core.correlation import get_correlation_id
from ledger_sync_core.instrumentation import get_hook_registry
from ledger_sync_core.ports.checkpoint import ICheckpointStore
from ledger_sync_core.primitives.exceptions import CheckpointError

logger = logging.getLogger(__name__)

DEFAULT_CHECKPOINT_KEY = "lastProcessedBlock"


class InMemoryCheckpointStore(ICheckpointStore):
    """In-memory checkpoint store for testing.

    Keeps every saved value in ``history`` so tests can assert monotonicity.
    """

    def __init__(self, position: int | None = None) -> None:
        self._position = position
        self.history: list[int] = []

    async def load(self) -> int | None:
        return self._position

    async def save(self, position: int) -> None:
        registry = get_hook_registry()
        await registry.execute_all(
            "checkpoint.save",
            {
                "checkpoint.backend": "memory",
                "checkpoint.position": position,
                "correlation_id": get_correlation_id(),
            },
            lambda: self._save_internal(position),
        )

    async def _save_internal(self, position: int) -> None:
        self._position = position
        self.history.append(position)

    def clear(self) -> None:
        """Reset position and history (for tests)."""
        self._position = None
        self.history.clear()


class FileCheckpointStore(ICheckpointStore):
    """Checkpoint kept as ``{"lastProcessedBlock": <int>}`` in a local JSON file.

    Saves go to ``<path>.tmp`` first, are fsynced, then atomically replace
    the real file, so a crash mid-save leaves the previous value readable.
    """

    def __init__(
        self, path: str | os.PathLike[str], *, key: str = DEFAULT_CHECKPOINT_KEY
    ) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> int | None:
        return await asyncio.to_thread(self._read)

    def _read(self) -> int | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CheckpointError(
                f"Cannot read checkpoint file {self._path}: {exc}"
            ) from exc

        try:
            value = json.loads(raw)[self._key]
        except (ValueError, KeyError, TypeError):
            logger.warning(
                "Checkpoint file %s has no valid %r; "
                "falling back to the configured start",
                self._path,
                self._key,
            )
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning(
                "Checkpoint file %s holds invalid position %r; "
                "falling back to the configured start",
                self._path,
                value,
            )
            return None
        return value

    async def save(self, position: int) -> None:
        registry = get_hook_registry()
        await registry.execute_all(
            "checkpoint.save",
            {
                "checkpoint.backend": "file",
                "checkpoint.path": str(self._path),
                "checkpoint.position": position,
                "correlation_id": get_correlation_id(),
            },
            lambda: asyncio.to_thread(self._write, position),
        )

    def _write(self, position: int) -> None:
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump({self._key: position}, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise CheckpointError(
                f"Cannot write checkpoint file {self._path}: {exc}"
            ) from exc
