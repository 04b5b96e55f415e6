from __future__ import annotations

from functools import lru_cache

from campus_market.config import get_settings

from .base import DataStore
from .firebase_store import FirebaseDataStore
from .memory_store import MemoryDataStore

_BACKENDS: dict[str, type[DataStore]] = {
    "firebase": FirebaseDataStore,
    "memory": MemoryDataStore,
}


@lru_cache()
def get_datastore() -> DataStore:
    """Return the configured backend, built on first use.

    Handlers receive it through ``Depends(get_datastore)`` so tests can
    swap it with ``app.dependency_overrides``.
    """

    settings = get_settings()
    backend_key = settings.datastore_backend.lower()
    if backend_key not in _BACKENDS:
        raise ValueError(f"Unsupported datastore backend: {backend_key}")
    return _BACKENDS[backend_key]()
