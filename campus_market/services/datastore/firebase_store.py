"""Firebase Realtime Database backend.

Every table lives under its own top-level node and every row under its
id::

    /{table}/{row_id}

Equality filters use the first filter as an ``order_by_child`` /
``equal_to`` query (the field needs an ``.indexOn`` rule, see
``database.rules.json``); further filters and ordering run in Python.
Counters are updated inside Realtime Database transactions.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from firebase_admin import db

from campus_market.services.exceptions import ConflictError
from campus_market.services.firebase_app import ensure_firebase_app

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


class _FirebaseSubscription(Subscription):
    def __init__(self, registration: db.ListenerRegistration) -> None:
        self._registration = registration
        self._closed = False

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._registration.close()


class _TableListener:
    """Turns raw streaming events for one table into row-level ChangeEvents.

    The first ``put`` at ``/`` is the current snapshot and only primes the
    set of known ids, so subscribers see changes made after they joined.
    """

    def __init__(self, table: str, callback: ChangeCallback) -> None:
        self._table = table
        self._callback = callback
        self._known: set[str] = set()
        self._primed = False

    def __call__(self, event: db.Event) -> None:
        try:
            self._handle(event.event_type, event.path or "/", event.data)
        except Exception:  # pragma: no cover
            logger.exception("Change listener failed for table %s", self._table)

    def _handle(self, event_type: str, path: str, data: Any) -> None:
        parts = [p for p in path.split("/") if p]
        if not parts:
            if event_type == "put" and not self._primed:
                self._primed = True
                self._known = set(data.keys()) if isinstance(data, dict) else set()
                return
            # Multi-row write at the table root
            for row_id, row in (data or {}).items():
                self._emit_row(row_id, row, partial=event_type == "patch")
            return

        row_id = parts[0]
        if len(parts) == 1:
            self._emit_row(row_id, data, partial=event_type == "patch")
        else:
            self._emit(ChangeEvent(type="UPDATE", table=self._table, row_id=row_id))

    def _emit_row(self, row_id: str, row: Any, *, partial: bool) -> None:
        if row is None:
            if row_id in self._known:
                self._known.discard(row_id)
                self._emit(ChangeEvent(type="DELETE", table=self._table, row_id=row_id))
            return
        if not isinstance(row, dict):
            # push() placeholder written before the row body
            return
        if row_id in self._known:
            self._emit(ChangeEvent(type="UPDATE", table=self._table, row_id=row_id, row=None if partial else row))
        else:
            self._known.add(row_id)
            self._emit(ChangeEvent(type="INSERT", table=self._table, row_id=row_id, row=row))

    def _emit(self, event: ChangeEvent) -> None:
        self._callback(event)


class FirebaseDataStore(DataStore):
    """Wrapper around Firebase Realtime Database operations."""

    name = "firebase"

    def __init__(self, root: Optional[db.Reference] = None) -> None:
        if root is None:
            ensure_firebase_app()
            root = db.reference("/")
        self._root = root

    def _table(self, table: str) -> db.Reference:
        return self._root.child(table)

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
        ref = self._table(table)
        if wanted:
            field, value = next(iter(wanted.items()))
            raw_items = ref.order_by_child(field).equal_to(value).get() or {}
        else:
            raw_items = ref.get() or {}

        rows = [dict(data, id=data.get("id", key)) for key, data in raw_items.items() if isinstance(data, dict)]
        # In-Python filtering for the remaining fields
        rows = [r for r in rows if matches(r, wanted)]
        return order_rows(rows, order_by, descending, limit)

    def get(self, table: str, row_id: str) -> Optional[dict[str, Any]]:
        data = self._table(table).child(row_id).get()
        if not isinstance(data, dict):
            return None
        return dict(data, id=data.get("id", row_id))

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        data = dict(row)
        if data.get("id"):
            row_ref = self._table(table).child(data["id"])
        else:
            # push() returns a reference with a generated, time-ordered key
            row_ref = self._table(table).push()
            data["id"] = row_ref.key
        data.setdefault("created_at", utcnow_iso())
        row_ref.set(data)
        logger.debug("Inserted %s/%s", table, data["id"])
        return data

    def update(self, table: str, row_id: str, changes: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        row_ref = self._table(table).child(row_id)
        current = row_ref.get()
        if not isinstance(current, dict):
            return None
        patch = dict(changes)
        patch.pop("id", None)
        patch["updated_at"] = utcnow_iso()
        row_ref.update(patch)
        logger.debug("Updated %s/%s", table, row_id)
        return {**current, **patch, "id": row_id}

    def delete(self, table: str, row_id: str) -> bool:
        row_ref = self._table(table).child(row_id)
        if row_ref.get(shallow=True) is None:
            return False
        row_ref.delete()
        logger.debug("Deleted %s/%s", table, row_id)
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
        row_ref = self._table(table).child(row_id)
        if row_ref.get(shallow=True) is None:
            return None

        def _apply(current: Any) -> int:
            return max(floor, int(current or 0) + delta)

        try:
            return row_ref.child(field).transaction(_apply)
        except db.TransactionAbortedError as exc:
            raise ConflictError(f"Counter update on {table}/{row_id}.{field} aborted") from exc

    # -------------------------------------------------------------------
    # Change feed
    # -------------------------------------------------------------------

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        registration = self._table(table).listen(_TableListener(table, callback))
        logger.debug("Listening for changes on %s", table)
        return _FirebaseSubscription(registration)
