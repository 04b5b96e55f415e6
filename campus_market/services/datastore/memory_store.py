"""In-process data store for local development and tests."""
from __future__ import annotations

import copy
import logging
import threading
import uuid
from collections import defaultdict
from typing import Any, Mapping, Optional

from .base import (
    ChangeCallback,
    ChangeEvent,
    DataStore,
    Subscription,
    matches,
    normalize_filters,
    order_rows,
    utcnow_iso,
)

logger = logging.getLogger(__name__)


class _MemorySubscription(Subscription):
    def __init__(self, store: "MemoryDataStore", table: str, callback: ChangeCallback) -> None:
        self._store = store
        self._table = table
        self._callback = callback

    def close(self) -> None:
        self._store._unsubscribe(self._table, self._callback)


class MemoryDataStore(DataStore):
    """Thread-safe dict-of-dicts store with synchronous change fan-out."""

    name = "memory"

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._subscribers: dict[str, list[ChangeCallback]] = defaultdict(list)
        self._lock = threading.RLock()

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    def query(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        wanted = normalize_filters(filters)
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._tables[table].values() if matches(r, wanted)]
        return order_rows(rows, order_by, descending, limit)

    def get(self, table: str, row_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            row = self._tables[table].get(row_id)
            return copy.deepcopy(row) if row is not None else None

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        data = copy.deepcopy(dict(row))
        data["id"] = data.get("id") or uuid.uuid4().hex
        data.setdefault("created_at", utcnow_iso())
        with self._lock:
            self._tables[table][data["id"]] = data
            stored = copy.deepcopy(data)
        logger.debug("Inserted %s/%s", table, data["id"])
        self._notify(ChangeEvent(type="INSERT", table=table, row_id=data["id"], row=stored))
        return copy.deepcopy(data)

    def update(self, table: str, row_id: str, changes: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        with self._lock:
            row = self._tables[table].get(row_id)
            if row is None:
                return None
            row.update(copy.deepcopy(dict(changes)))
            row["id"] = row_id
            row["updated_at"] = utcnow_iso()
            stored = copy.deepcopy(row)
        logger.debug("Updated %s/%s", table, row_id)
        self._notify(ChangeEvent(type="UPDATE", table=table, row_id=row_id, row=stored))
        return copy.deepcopy(stored)

    def delete(self, table: str, row_id: str) -> bool:
        with self._lock:
            removed = self._tables[table].pop(row_id, None)
        if removed is None:
            return False
        logger.debug("Deleted %s/%s", table, row_id)
        self._notify(ChangeEvent(type="DELETE", table=table, row_id=row_id))
        return True

    def increment(
        self,
        table: str,
        row_id: str,
        field: str,
        delta: int,
        *,
        floor: int = 0,
    ) -> Optional[int]:
        with self._lock:
            row = self._tables[table].get(row_id)
            if row is None:
                return None
            value = max(floor, int(row.get(field) or 0) + delta)
            row[field] = value
            stored = copy.deepcopy(row)
        self._notify(ChangeEvent(type="UPDATE", table=table, row_id=row_id, row=stored))
        return value

    # -------------------------------------------------------------------
    # Change feed
    # -------------------------------------------------------------------

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        with self._lock:
            self._subscribers[table].append(callback)
        return _MemorySubscription(self, table, callback)

    def _unsubscribe(self, table: str, callback: ChangeCallback) -> None:
        with self._lock:
            try:
                self._subscribers[table].remove(callback)
            except ValueError:
                pass

    def _notify(self, event: ChangeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers[event.table])
        for callback in callbacks:
            try:
                callback(event)
            except Exception:  # pragma: no cover
                logger.exception("Change callback failed for %s/%s", event.table, event.row_id)
