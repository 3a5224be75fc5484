from .event_source import InMemoryEventSource, InMemorySubscription
from .record_store import InMemoryRecordStore

__all__ = [
    "InMemoryEventSource",
    "InMemoryRecordStore",
    "InMemorySubscription",
]
