"""Listing browse, detail and owner CRUD for products, houses and services."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ValidationError

from campus_market.models import (
    ContactLinks,
    EngagementAction,
    Listing,
    ListingDetail,
    ListingKind,
    Profile,
    Role,
    Viewer,
)
from campus_market.services.accounts import promoted_user_ids
from campus_market.services.categories import CategoryService
from campus_market.services.datastore import DataStore
from campus_market.services.engagement import EngagementService
from campus_market.services.exceptions import ForbiddenError, NotFoundError
from campus_market.services.image_optimizer import (
    is_image_data_url,
    is_webp_data_url,
    optimize_image,
    parse_data_url,
)
from campus_market.services.tables import PROFILES
from campus_market.utils.contact import tel_link, whatsapp_link

logger = logging.getLogger(__name__)

APPROVAL_PENDING_MESSAGE = "Can't post. Wait for admin approval."


class DashboardView(BaseModel):
    role: Role
    approved: bool
    kind: ListingKind
    profile: Optional[Profile] = None
    listings: list[dict[str, Any]] = []


class ListingService:
    def __init__(self, store: DataStore, *, country_code: str = "254") -> None:
        self._store = store
        self._categories = CategoryService(store)
        self._engagement = EngagementService(store)
        self._country_code = country_code

    # -------------------------------------------------------------------
    # Public browsing
    # -------------------------------------------------------------------

    def browse(
        self,
        kind: ListingKind,
        *,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> list[Listing]:
        """Listings of *kind*, promoted owners first, then newest first."""

        filters: dict[str, Any] = {}
        if category_id:
            filters["category_id"] = category_id
        if subcategory_id:
            filters["subcategory_id"] = subcategory_id
        rows = self._store.query(kind.table, filters=filters, order_by="created_at", descending=True)
        listings = _readable(kind, rows)

        term = (search or "").strip().lower()
        if term:
            listings = [item for item in listings if term in item.search_text()]
        if min_price is not None or max_price is not None:
            listings = [item for item in listings if item.asking_price.overlaps(min_price, max_price)]

        promoted = promoted_user_ids(self._store)
        # sorted() is stable, so newest-first order holds inside each group
        return sorted(listings, key=lambda item: item.owner_id not in promoted)

    def get(self, kind: ListingKind, listing_id: str) -> Listing:
        row = self._store.get(kind.table, listing_id)
        if row is None:
            raise NotFoundError(f"{kind.value} item {listing_id} not found")
        return kind.model.model_validate(row)

    def detail(self, kind: ListingKind, listing_id: str) -> ListingDetail:
        """Fetch a listing for its detail page and count the view."""

        self._engagement.record(kind, listing_id, EngagementAction.VIEW)
        listing = self.get(kind, listing_id)
        return ListingDetail(listing=listing.model_dump(mode="json"), contact=self._contact_links(listing))

    def _contact_links(self, listing: Listing) -> Optional[ContactLinks]:
        number = getattr(listing, "contact_number", None)
        if not number:
            owner = self._store.get(PROFILES, listing.owner_id)
            number = owner.get("phone_number") if owner else None
        if not number:
            return None
        text = f"Hi, I'm interested in {listing.title} for KSh {listing.asking_price}"
        return ContactLinks(
            tel=tel_link(number),
            whatsapp=whatsapp_link(number, text, country_code=self._country_code),
        )

    # -------------------------------------------------------------------
    # Owner dashboard
    # -------------------------------------------------------------------

    def _owner_kind(self, viewer: Viewer) -> ListingKind:
        kind = ListingKind.for_role(viewer.role)
        if kind is None or viewer.uid is None:
            raise ForbiddenError("Only sellers, landlords and service providers manage listings")
        return kind

    def dashboard(self, viewer: Viewer) -> DashboardView:
        kind = self._owner_kind(viewer)
        profile_row = self._store.get(PROFILES, viewer.uid)
        rows = self._store.query(
            kind.table,
            filters={kind.owner_field: viewer.uid},
            order_by="created_at",
            descending=True,
        )
        return DashboardView(
            role=viewer.role,
            approved=viewer.approved,
            kind=kind,
            profile=Profile.model_validate(profile_row) if profile_row else None,
            listings=[item.model_dump(mode="json") for item in _readable(kind, rows)],
        )

    def create(self, viewer: Viewer, payload: Mapping[str, Any]) -> Listing:
        kind = self._owner_kind(viewer)
        if not viewer.approved:
            raise ForbiddenError(APPROVAL_PENDING_MESSAGE)
        row = self._prepare_row(kind, payload)
        row.update({kind.owner_field: viewer.uid, "views": 0, "likes": 0})
        stored = self._store.insert(kind.table, row)
        logger.info("%s %s posted %s/%s", viewer.role.value, viewer.uid, kind.table, stored["id"])
        return kind.model.model_validate(stored)

    def update(self, viewer: Viewer, listing_id: str, payload: Mapping[str, Any]) -> Listing:
        kind = self._owner_kind(viewer)
        if not viewer.approved:
            raise ForbiddenError(APPROVAL_PENDING_MESSAGE)
        self._owned(kind, viewer, listing_id)
        stored = self._store.update(kind.table, listing_id, self._prepare_row(kind, payload))
        if stored is None:
            raise NotFoundError(f"{kind.value} item {listing_id} not found")
        return kind.model.model_validate(stored)

    def delete(self, viewer: Viewer, listing_id: str) -> None:
        kind = self._owner_kind(viewer)
        self._owned(kind, viewer, listing_id)
        self._store.delete(kind.table, listing_id)
        logger.info("%s %s deleted %s/%s", viewer.role.value, viewer.uid, kind.table, listing_id)

    def _owned(self, kind: ListingKind, viewer: Viewer, listing_id: str) -> Listing:
        listing = self.get(kind, listing_id)
        if listing.owner_id != viewer.uid:
            raise ForbiddenError("You can only change your own listings")
        return listing

    def _prepare_row(self, kind: ListingKind, payload: Mapping[str, Any]) -> dict[str, Any]:
        data = kind.create_model.model_validate(payload)
        self._categories.check_assignment(kind.category_kind, data.category_id, data.subcategory_id)
        row = data.model_dump(mode="json")
        row["photo_url"] = _optimized_photo_url(row.get("photo_url"), kind.image_profile)
        return row


def _readable(kind: ListingKind, rows: list[dict[str, Any]]) -> list[Listing]:
    """Validate stored rows, skipping ones that no longer fit the model."""

    listings = []
    for row in rows:
        try:
            listings.append(kind.model.model_validate(row))
        except ValidationError as exc:
            logger.warning("Skipping unreadable %s row %s: %s", kind.table, row.get("id"), exc)
    return listings


def _optimized_photo_url(photo_url: Optional[str], profile: str) -> Optional[str]:
    """Re-encode inline photos that are not WebP yet; leave URLs alone."""

    if not is_image_data_url(photo_url) or is_webp_data_url(photo_url):
        return photo_url
    _, payload = parse_data_url(photo_url)
    return optimize_image(payload, profile).to_data_url()
