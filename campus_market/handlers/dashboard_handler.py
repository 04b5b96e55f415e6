"""Owner dashboards for sellers, landlords and service providers.

The viewer's role picks the listing kind once; every endpoint below works
on that kind only.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from campus_market.models import Viewer
from campus_market.services.listings import DashboardView, ListingService

from .deps import get_listing_service, require_owner

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardView)
def dashboard(viewer: Viewer = Depends(require_owner), listings: ListingService = Depends(get_listing_service)):
    return listings.dashboard(viewer)


@router.post("/listings", status_code=201)
def create_listing(
    payload: dict[str, Any] = Body(...),
    viewer: Viewer = Depends(require_owner),
    listings: ListingService = Depends(get_listing_service),
):
    return listings.create(viewer, payload).model_dump(mode="json")


@router.put("/listings/{listing_id}")
def update_listing(
    listing_id: str,
    payload: dict[str, Any] = Body(...),
    viewer: Viewer = Depends(require_owner),
    listings: ListingService = Depends(get_listing_service),
):
    return listings.update(viewer, listing_id, payload).model_dump(mode="json")


@router.delete("/listings/{listing_id}", status_code=204)
def delete_listing(
    listing_id: str,
    viewer: Viewer = Depends(require_owner),
    listings: ListingService = Depends(get_listing_service),
):
    listings.delete(viewer, listing_id)
    return Response(status_code=204)
