from .base import ChangeCallback, ChangeEvent, DataStore, Subscription
from .firebase_store import FirebaseDataStore
from .memory_store import MemoryDataStore
from .registry import get_datastore

__all__ = [
    "ChangeCallback",
    "ChangeEvent",
    "DataStore",
    "Subscription",
    "FirebaseDataStore",
    "MemoryDataStore",
    "get_datastore",
]
