"""SyncEngine — mirrors ledger events into the record store, checkpointing by range.

State machine::

    bootstrapping -> catching_up -> live_polling | live_subscribed
          ^               |                 |
          +--- backoff <--+-----------------+   (retryable failure)

    any state -> halted   (fatal: checkpoint cannot be persisted)
    any state -> stopped  (stop requested)

The checkpoint value is threaded through the phases as an argument and
return value; it is only written after every kind of a sub-range has been
applied, so a crash mid-range replays that whole range on restart.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from typing import TYPE_CHECKING

from ledger_sync_core.correlation import (
    correlation_scope,
    get_correlation_id,
    range_correlation_id,
)
from ledger_sync_core.instrumentation import get_hook_registry
from ledger_sync_core.ports.background_worker import IBackgroundWorker
from ledger_sync_core.primitives.exceptions import (
    CheckpointError,
    CheckpointRegressionError,
    EventDecodingError,
    FatalSyncError,
    RetryableError,
    SourceUnavailableError,
    SyncHaltedError,
)
from ledger_sync_core.retry import RetryPolicy

from .projectors import default_registry
from .ranges import BlockRange, pending_ranges

if TYPE_CHECKING:
    from ledger_sync_core.domain.events import RawLog
    from ledger_sync_core.ports.checkpoint import ICheckpointStore
    from ledger_sync_core.ports.event_source import IEventSource, ISubscription
    from ledger_sync_core.ports.record_store import IRecordStore

    from .registry import ProjectorRegistry

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_POLL_INTERVAL_SECONDS = 120.0


class SyncState(str, enum.Enum):
    BOOTSTRAPPING = "bootstrapping"
    CATCHING_UP = "catching_up"
    LIVE_POLLING = "live_polling"
    LIVE_SUBSCRIBED = "live_subscribed"
    HALTED = "halted"
    STOPPED = "stopped"


class _LiveCursor:
    """Checkpoint carried through subscription callbacks."""

    def __init__(self, position: int) -> None:
        self.position = position


class SyncEngine(IBackgroundWorker):
    """Catches the record store up with the ledger, then keeps it current."""

    def __init__(
        self,
        source: IEventSource,
        store: IRecordStore,
        checkpoint_store: ICheckpointStore,
        *,
        registry: ProjectorRegistry | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        use_subscription: bool = False,
        start_position: int | None = None,
        live_checkpoint: bool = False,
        restart_policy: RetryPolicy | None = None,
        checkpoint_policy: RetryPolicy | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")
        if start_position is not None and start_position < 0:
            raise ValueError("start_position must be >= 0")
        self._source = source
        self._store = store
        self._checkpoints = checkpoint_store
        self._registry = registry or default_registry()
        self._registry.ensure_complete()
        self._batch_size = batch_size
        self._poll_interval = poll_interval_seconds
        self._use_subscription = use_subscription
        self._start_position = start_position
        self._live_checkpoint = live_checkpoint
        self._restart_policy = restart_policy or RetryPolicy(
            max_attempts=None, base_delay=5.0, max_delay=300.0
        )
        self._checkpoint_policy = checkpoint_policy or RetryPolicy(
            max_attempts=5, base_delay=0.5, max_delay=10.0
        )
        self._state = SyncState.STOPPED
        self._stopping = asyncio.Event()
        self._apply_lock = asyncio.Lock()
        self._failures = 0
        self._last_committed: int | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def last_committed(self) -> int | None:
        """Most recent checkpoint this engine saved (None before the first save)."""
        return self._last_committed

    # ── Lifecycle ──────────────────────────────────────────────────

    async def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self.run(), name="ledger-sync-engine")

    async def stop(self, timeout: float | None = 30.0) -> None:
        """Request shutdown and wait for the in-flight write to finish."""
        self.request_stop()
        task, self._task = self._task, None
        if task is None:
            return
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError:
            logger.warning("Sync engine did not stop in time, cancelling")
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        except FatalSyncError:
            # Already logged when the engine halted.
            pass

    def request_stop(self) -> None:
        """Signal-safe stop request: no new range, poll or event is started."""
        self._stopping.set()

    async def run(self) -> None:
        """Run until stopped. Raises ``SyncHaltedError`` on a fatal error."""
        while not self._stopping.is_set():
            try:
                checkpoint, head = await self._bootstrap()
                checkpoint = await self.catch_up(checkpoint, head)
                if self._stopping.is_set():
                    break
                logger.info("Finished processing historical events")
                await self._run_live(checkpoint)
            except FatalSyncError as exc:
                self._state = SyncState.HALTED
                logger.critical("Sync engine halted: %s", exc, exc_info=True)
                if isinstance(exc, SyncHaltedError):
                    raise
                raise SyncHaltedError(str(exc)) from exc
            except Exception as exc:  # noqa: BLE001
                self._failures += 1
                delay = self._restart_policy.delay_for_attempt(self._failures)
                logger.error(
                    "Sync error (attempt %d): %s. "
                    "Restarting from checkpoint in %.1f seconds",
                    self._failures,
                    exc,
                    delay,
                    exc_info=not isinstance(exc, RetryableError),
                )
                await self._sleep(delay)
        self._state = SyncState.STOPPED
        logger.info("Sync engine stopped")

    # ── Phases ─────────────────────────────────────────────────────

    async def _bootstrap(self) -> tuple[int, int]:
        self._state = SyncState.BOOTSTRAPPING
        stored = await self._checkpoints.load()
        head = await self._source.current_head()
        if stored is not None:
            logger.info("Resuming from checkpoint %s (head %s)", stored, head)
            return stored, head

        if self._start_position is not None:
            checkpoint, origin = self._start_position, "configured start"
        else:
            checkpoint, origin = head, "current head"
        logger.info("No checkpoint stored, starting from %s %s", origin, checkpoint)
        # Persist the default so a restart cannot skip past it.
        await self._commit(None, checkpoint)
        return checkpoint, head

    async def catch_up(self, checkpoint: int, head: int) -> int:
        """Apply every pending sub-range up to *head*; return the new checkpoint."""
        self._state = SyncState.CATCHING_UP
        for block_range in pending_ranges(checkpoint, head, self._batch_size):
            if self._stopping.is_set():
                break
            if not await self._apply_range(block_range):
                break
            checkpoint = await self._commit(checkpoint, block_range.last)
        return checkpoint

    async def _apply_range(self, block_range: BlockRange) -> bool:
        with correlation_scope(range_correlation_id(*block_range)):
            logger.info(
                "Processing blocks %s to %s", block_range.first, block_range.last
            )
            registry = get_hook_registry()
            return bool(
                await registry.execute_all(
                    "sync.range",
                    {
                        "range.first": block_range.first,
                        "range.last": block_range.last,
                        "correlation_id": get_correlation_id(),
                    },
                    lambda: self._apply_range_internal(block_range),
                )
            )

    async def _apply_range_internal(self, block_range: BlockRange) -> bool:
        """Query and apply each kind in declared order; False if interrupted."""
        for kind in self._registry.kinds():
            if self._stopping.is_set():
                return self._interrupted(block_range)
            logs = await self._source.query_range(
                kind, block_range.first, block_range.last
            )
            for raw in logs:
                if self._stopping.is_set():
                    return self._interrupted(block_range)
                await self._apply_log(raw)
        return True

    @staticmethod
    def _interrupted(block_range: BlockRange) -> bool:
        logger.info("Stop requested, leaving blocks %s uncommitted", block_range)
        return False

    async def _apply_log(self, raw: RawLog) -> bool:
        """Decode and project one log; False when it was skipped."""
        try:
            event = self._source.decode(raw)
        except EventDecodingError as exc:
            logger.warning("Skipping undecodable event: %s", exc)
            return False

        registry = get_hook_registry()
        async with self._apply_lock:
            await registry.execute_all(
                f"projection.apply.{event.kind.value}",
                {
                    "event.kind": event.kind.value,
                    "event.block_number": event.block_number,
                    "event.log_index": event.log_index,
                    "correlation_id": get_correlation_id(),
                },
                lambda: self._registry.apply(event, self._store, self._source),
            )
        return True

    async def _commit(self, previous: int | None, position: int) -> int:
        """Save *position*, retrying; halt when the store keeps failing."""
        if previous is not None and position < previous:
            raise CheckpointRegressionError(previous, position)
        attempt = 0
        while True:
            attempt += 1
            try:
                await self._checkpoints.save(position)
                break
            except CheckpointError as exc:
                if not self._checkpoint_policy.should_retry(attempt):
                    raise SyncHaltedError(
                        f"Checkpoint {position} could not be saved after "
                        f"{attempt} attempts: {exc}"
                    ) from exc
                logger.warning(
                    "Checkpoint save failed (attempt %d): %s, retrying", attempt, exc
                )
                await self._checkpoint_policy.wait_before_retry(attempt)
        self._last_committed = position
        self._failures = 0
        logger.info("Last processed block updated to: %s", position)
        return position

    async def _run_live(self, checkpoint: int) -> None:
        if self._use_subscription and self._source.supports_subscription:
            await self._run_subscribed(checkpoint)
            return
        if self._use_subscription:
            logger.warning("Event source cannot push events, polling instead")
        await self._run_polling(checkpoint)

    async def _run_polling(self, checkpoint: int) -> None:
        self._state = SyncState.LIVE_POLLING
        while not await self._sleep(self._poll_interval):
            head = await self._source.current_head()
            checkpoint = await self.catch_up(checkpoint, head)
            self._state = SyncState.LIVE_POLLING

    async def _run_subscribed(self, checkpoint: int) -> None:
        cursor = _LiveCursor(checkpoint)
        failure: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        gap_closed = asyncio.Event()
        attached = False

        async def on_log(raw: RawLog) -> None:
            # Pushed logs wait until blocks mined while subscribing are scanned.
            await gap_closed.wait()
            if not attached or self._stopping.is_set() or failure.done():
                return
            try:
                await self._apply_log(raw)
                if self._live_checkpoint:
                    await self._advance_live(cursor, raw.block_number - 1)
            except Exception as exc:  # noqa: BLE001
                if not failure.done():
                    failure.set_exception(exc)

        subscription = await self._source.subscribe(self._registry.kinds(), on_log)
        try:
            head = await self._source.current_head()
            cursor.position = await self.catch_up(cursor.position, head)
            attached = True
        except BaseException:
            await subscription.close()
            raise
        finally:
            gap_closed.set()
        self._state = SyncState.LIVE_SUBSCRIBED
        logger.info("Subscribed to live events from checkpoint %s", cursor.position)
        await self._wait_live(subscription, failure)

    async def _wait_live(
        self, subscription: ISubscription, failure: asyncio.Future[None]
    ) -> None:
        stop_task = asyncio.ensure_future(self._stopping.wait())
        closed_task = asyncio.ensure_future(subscription.wait_closed())
        try:
            await asyncio.wait(
                {stop_task, closed_task, failure},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            stop_task.cancel()
            closed_task.cancel()
            await subscription.close()
            logger.info("Live subscription detached")

        if failure.done():
            exc = failure.exception()
            if exc is not None:
                raise exc
        if closed_task.done() and not closed_task.cancelled():
            exc = closed_task.exception()
            if exc is not None:
                raise exc
            if not self._stopping.is_set():
                raise SourceUnavailableError(
                    "Live subscription closed by the source", operation="subscribe"
                )

    async def _advance_live(self, cursor: _LiveCursor, position: int) -> None:
        # Logs arrive in block order, so block N-1 is complete once N is seen.
        if position > cursor.position:
            cursor.position = await self._commit(cursor.position, position)

    async def _sleep(self, seconds: float) -> bool:
        """Sleep unless stopped first; True when a stop was requested."""
        if seconds <= 0:
            await asyncio.sleep(0)
            return self._stopping.is_set()
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True
