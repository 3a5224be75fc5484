from .background_worker import IBackgroundWorker
from .checkpoint import ICheckpointStore
from .event_source import IEventSource, ILedgerReader, ISubscription
from .record_store import IRecordStore

__all__ = [
    "IBackgroundWorker",
    "ICheckpointStore",
    "IEventSource",
    "ILedgerReader",
    "IRecordStore",
    "ISubscription",
]
