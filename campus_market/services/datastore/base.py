from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Literal, Mapping, Optional

from pydantic import BaseModel


class ChangeEvent(BaseModel):
    """A row change delivered by :meth:`DataStore.subscribe`.

    ``row`` is the full row for inserts, the new row (or ``None`` when only
    a partial patch is known) for updates, and ``None`` for deletes.
    """

    type: Literal["INSERT", "UPDATE", "DELETE"]
    table: str
    row_id: str
    row: Optional[dict[str, Any]] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(ABC):
    """Handle returned by :meth:`DataStore.subscribe`."""

    @abstractmethod
    def close(self) -> None:
        """Stop delivering events. Safe to call more than once."""

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_filters(filters: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not filters:
        return {}
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in filters.items()}


def matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(row.get(k) == v for k, v in filters.items())


def order_rows(
    rows: list[dict[str, Any]],
    order_by: Optional[str],
    descending: bool,
    limit: Optional[int],
) -> list[dict[str, Any]]:
    if order_by is not None:
        # Rows missing the field sort first (last when descending).
        rows = sorted(
            rows,
            key=lambda r: (r.get(order_by) is not None, r.get(order_by)),
            reverse=descending,
        )
    if limit is not None:
        rows = rows[:limit]
    return rows


class DataStore(ABC):
    """Capability set every screen and handler talks to.

    Rows are plain JSON-ready dicts keyed by ``id`` inside named tables.
    Implementations stamp ``created_at`` on insert and ``updated_at`` on
    update.
    """

    name: str = "abstract"

    @abstractmethod
    def query(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching all equality *filters*, ordered then limited."""

    @abstractmethod
    def get(self, table: str, row_id: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert *row* and return it with ``id`` and ``created_at`` filled in."""

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        """Merge *changes* into a row. Returns ``None`` if the row is missing."""

    @abstractmethod
    def delete(self, table: str, row_id: str) -> bool:
        ...

    @abstractmethod
    def increment(
        self,
        table: str,
        row_id: str,
        field: str,
        delta: int,
        *,
        floor: int = 0,
    ) -> Optional[int]:
        """Atomically add *delta* to a counter, never going below *floor*.

        Returns the new value, or ``None`` if the row is missing.
        """

    @abstractmethod
    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        """Deliver changes to *table* made after this call to *callback*.

        Callbacks may run on a background thread.
        """
