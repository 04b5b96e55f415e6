"""Public listing pages: browse, detail, like / unlike."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from campus_market.models import EngagementAction, EngagementResult, ListingDetail, ListingKind
from campus_market.services.datastore import DataStore, get_datastore
from campus_market.services.engagement import EngagementService
from campus_market.services.listings import ListingService

from .deps import get_listing_service

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("/{kind}")
def browse(
    kind: ListingKind,
    category_id: Optional[str] = None,
    subcategory_id: Optional[str] = None,
    q: Optional[str] = Query(None, description="Free-text search"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    listings: ListingService = Depends(get_listing_service),
):
    items = listings.browse(
        kind,
        category_id=category_id,
        subcategory_id=subcategory_id,
        search=q,
        min_price=min_price,
        max_price=max_price,
    )
    return [item.model_dump(mode="json") for item in items]


@router.get("/{kind}/{listing_id}", response_model=ListingDetail)
def detail(kind: ListingKind, listing_id: str, listings: ListingService = Depends(get_listing_service)):
    return listings.detail(kind, listing_id)


@router.post("/{kind}/{listing_id}/like", response_model=EngagementResult)
def like(kind: ListingKind, listing_id: str, store: DataStore = Depends(get_datastore)):
    return EngagementService(store).record(kind, listing_id, EngagementAction.LIKE)


@router.post("/{kind}/{listing_id}/unlike", response_model=EngagementResult)
def unlike(kind: ListingKind, listing_id: str, store: DataStore = Depends(get_datastore)):
    return EngagementService(store).record(kind, listing_id, EngagementAction.UNLIKE)
