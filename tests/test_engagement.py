from __future__ import annotations

import pytest

from campus_market.models import EngagementAction, ListingKind
from campus_market.services.engagement import EngagementService
from campus_market.services.exceptions import NotFoundError


@pytest.fixture
def engagement(store):
    return EngagementService(store)


@pytest.fixture
def service_row(store):
    return store.insert("services", {"title": "Tutoring", "provider_id": "p1", "views": 3, "likes": 1})


def test_view_increments_views(engagement, service_row):
    result = engagement.record(ListingKind.SERVICE, service_row["id"], EngagementAction.VIEW)
    assert result.views == 4
    assert result.likes is None


def test_like_and_unlike(engagement, store, service_row):
    assert engagement.record(ListingKind.SERVICE, service_row["id"], EngagementAction.LIKE).likes == 2
    assert engagement.record(ListingKind.SERVICE, service_row["id"], EngagementAction.UNLIKE).likes == 1
    assert store.get("services", service_row["id"])["likes"] == 1


def test_unlike_never_goes_negative(engagement, service_row):
    for _ in range(3):
        result = engagement.record(ListingKind.SERVICE, service_row["id"], EngagementAction.UNLIKE)
    assert result.likes == 0


def test_missing_counters_start_at_zero(engagement, store):
    row = store.insert("products", {"title": "Chair", "seller_id": "s1"})
    assert engagement.record(ListingKind.PRODUCT, row["id"], EngagementAction.LIKE).likes == 1


def test_unknown_listing(engagement):
    with pytest.raises(NotFoundError) as exc_info:
        engagement.record(ListingKind.HOUSE, "missing", EngagementAction.VIEW)
    assert exc_info.value.message == "Item not found"


def test_kind_is_scoped_to_its_table(engagement, service_row):
    with pytest.raises(NotFoundError):
        engagement.record(ListingKind.PRODUCT, service_row["id"], EngagementAction.LIKE)
