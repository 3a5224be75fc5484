"""Exception taxonomy shared by every ledger-sync package."""

from __future__ import annotations


class LedgerSyncError(Exception):
    """Root exception for the entire ledger-sync toolkit."""


class InfrastructureError(LedgerSyncError):
    """Base class for all infrastructure-related errors."""


class RetryableError(LedgerSyncError):
    """Marker for failures that are expected to clear up on their own.

    The sync engine backs off and restarts from the last checkpoint when one
    of these escapes a stage.
    """


class SourceUnavailableError(InfrastructureError, RetryableError):
    """Raised when the remote ledger cannot be reached, times out or rate-limits."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class RecordStoreError(PersistenceError, RetryableError):
    """Raised when a read or write against the target store fails.

    Distinct from "row not found": lookups report absence as ``None``.
    """


class CheckpointError(PersistenceError, RetryableError):
    """Raised when checkpoint read/write fails."""


class EventDecodingError(LedgerSyncError):
    """Raised when a delivered log does not match its declared kind's schema.

    Never retried: the event is logged and skipped.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        block_number: int | None = None,
        log_index: int | None = None,
    ) -> None:
        self.kind = kind
        self.block_number = block_number
        self.log_index = log_index
        super().__init__(message)


class HandlerError(LedgerSyncError):
    """Base class for handler registration, lookup and execution errors."""


class ProjectionError(HandlerError):
    """Raised when the projector set is misconfigured (e.g. a kind has none)."""


class FatalSyncError(LedgerSyncError):
    """Base for failures after which the engine must halt instead of retrying."""


class CheckpointRegressionError(FatalSyncError):
    """Raised when a save would move the checkpoint backwards."""

    def __init__(self, previous: int, attempted: int) -> None:
        self.previous = previous
        self.attempted = attempted
        super().__init__(
            f"Refusing to move checkpoint backwards from {previous} to {attempted}"
        )


class SyncHaltedError(FatalSyncError):
    """Raised when the engine enters the halted state."""
