"""View and like counters on listings."""
from __future__ import annotations

import logging

from campus_market.models import EngagementAction, EngagementResult, ListingKind
from campus_market.services.datastore import DataStore
from campus_market.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

_COUNTER_STEPS: dict[EngagementAction, tuple[str, int]] = {
    EngagementAction.VIEW: ("views", 1),
    EngagementAction.LIKE: ("likes", 1),
    EngagementAction.UNLIKE: ("likes", -1),
}


class EngagementService:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    def record(self, kind: ListingKind, listing_id: str, action: EngagementAction) -> EngagementResult:
        field, delta = _COUNTER_STEPS[action]
        value = self._store.increment(kind.table, listing_id, field, delta, floor=0)
        if value is None:
            raise NotFoundError("Item not found")
        logger.debug("%s on %s/%s -> %s=%d", action.value, kind.table, listing_id, field, value)
        return EngagementResult(kind=kind, id=listing_id, **{field: value})
