"""Listing models for the three marketplace sections.

Products, rental houses and services share counters, category links and
a photo; each kind has its own table, owner column and owning role::

    kind       table      owner column   role
    products   products   seller_id      seller
    houses     houses     landlord_id    landlord
    services   services   provider_id    service_provider

Prices are always stored as a :class:`PriceRange`. Legacy free-text
values (``"KSh 5000-7000"``) are accepted on input and parsed once.
"""
from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campus_market.utils.pricing import parse_price_text

from .category import CategoryKind
from .role import Role


class ListingKind(str, Enum):
    PRODUCT = "products"
    HOUSE = "houses"
    SERVICE = "services"

    @property
    def table(self) -> str:
        return self.value

    @property
    def owner_field(self) -> str:
        return _OWNER_FIELDS[self]

    @property
    def price_field(self) -> str:
        return "rent" if self is ListingKind.HOUSE else "price"

    @property
    def owner_role(self) -> Role:
        return _OWNER_ROLES[self]

    @property
    def image_profile(self) -> str:
        return _IMAGE_PROFILES[self]

    @property
    def category_kind(self) -> CategoryKind:
        return _CATEGORY_KINDS[self]

    @property
    def model(self) -> type["Listing"]:
        return _MODELS[self]

    @property
    def create_model(self) -> type[BaseModel]:
        return _CREATE_MODELS[self]

    @classmethod
    def for_role(cls, role: Role) -> Optional["ListingKind"]:
        for kind, owner_role in _OWNER_ROLES.items():
            if owner_role is role:
                return kind
        return None


class PriceRange(BaseModel):
    """Asking price as ``min`` and optional ``max`` (open-ended when unset)."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0)
    max: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _coerce_legacy(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return {"min": value, "max": value}
        if isinstance(value, str):
            low, high = parse_price_text(value)
            return {"min": low, "max": high}
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "PriceRange":
        if self.max is not None and self.max < self.min:
            raise ValueError("max must not be below min")
        return self

    def overlaps(self, low: float | None = None, high: float | None = None) -> bool:
        """True if any price in this range falls inside ``[low, high]``."""

        upper = self.max if self.max is not None else math.inf
        if low is not None and upper < low:
            return False
        if high is not None and self.min > high:
            return False
        return True

    def __str__(self) -> str:
        if self.max is None:
            return f"{self.min:g}+"
        if self.max == self.min:
            return f"{self.min:g}"
        return f"{self.min:g}-{self.max:g}"


# ---------------------------------------------------------------------------
# Stored listings
# ---------------------------------------------------------------------------


class Listing(BaseModel):
    kind: ClassVar[ListingKind]

    id: str
    title: str
    photo_url: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    views: int = Field(0, ge=0)
    likes: int = Field(0, ge=0)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def owner_id(self) -> str:
        return getattr(self, self.kind.owner_field)

    @property
    def asking_price(self) -> PriceRange:
        return getattr(self, self.kind.price_field)

    def search_text(self) -> str:
        return self.title.lower()


class Product(Listing):
    kind: ClassVar[ListingKind] = ListingKind.PRODUCT

    description: Optional[str] = None
    price: PriceRange
    seller_id: str

    def search_text(self) -> str:
        return " ".join(filter(None, [self.title, self.description])).lower()


class House(Listing):
    kind: ClassVar[ListingKind] = ListingKind.HOUSE

    location: str
    house_type: str
    distance: float = Field(..., ge=0, description="Distance from campus in km")
    rent: PriceRange
    deposit: float = Field(0, ge=0)
    water: bool = False
    wifi: bool = False
    contact_number: str
    landlord_id: str

    def search_text(self) -> str:
        return " ".join([self.title, self.location, self.house_type]).lower()


class Service(Listing):
    kind: ClassVar[ListingKind] = ListingKind.SERVICE

    description: Optional[str] = None
    price: PriceRange
    availability: str
    contact_number: str
    provider_id: str

    def search_text(self) -> str:
        return " ".join(filter(None, [self.title, self.description, self.availability])).lower()


# ---------------------------------------------------------------------------
# Owner input
# ---------------------------------------------------------------------------


class _ListingInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    photo_url: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None


class ProductCreate(_ListingInput):
    description: Optional[str] = Field(default=None, max_length=2000)
    price: PriceRange


class HouseCreate(_ListingInput):
    location: str = Field(..., min_length=1, max_length=200)
    house_type: str = Field(..., min_length=1, max_length=100)
    distance: float = Field(..., ge=0)
    rent: PriceRange
    deposit: float = Field(0, ge=0)
    water: bool = False
    wifi: bool = False
    contact_number: str = Field(..., min_length=10, max_length=20)


class ServiceCreate(_ListingInput):
    description: Optional[str] = Field(default=None, max_length=2000)
    price: PriceRange
    availability: str = Field(..., min_length=1, max_length=200)
    contact_number: str = Field(..., min_length=10, max_length=20)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class ContactLinks(BaseModel):
    tel: str
    whatsapp: str


class ListingDetail(BaseModel):
    listing: dict[str, Any]
    contact: Optional[ContactLinks] = None


class EngagementAction(str, Enum):
    VIEW = "view"
    LIKE = "like"
    UNLIKE = "unlike"


class EngagementResult(BaseModel):
    kind: ListingKind
    id: str
    views: Optional[int] = None
    likes: Optional[int] = None


_OWNER_FIELDS = {
    ListingKind.PRODUCT: "seller_id",
    ListingKind.HOUSE: "landlord_id",
    ListingKind.SERVICE: "provider_id",
}
_OWNER_ROLES = {
    ListingKind.PRODUCT: Role.SELLER,
    ListingKind.HOUSE: Role.LANDLORD,
    ListingKind.SERVICE: Role.SERVICE_PROVIDER,
}
_IMAGE_PROFILES = {
    ListingKind.PRODUCT: "product",
    ListingKind.HOUSE: "house",
    ListingKind.SERVICE: "service",
}
_CATEGORY_KINDS = {
    ListingKind.PRODUCT: CategoryKind.PRODUCT,
    ListingKind.HOUSE: CategoryKind.HOUSE,
    ListingKind.SERVICE: CategoryKind.SERVICE,
}
_MODELS: dict[ListingKind, type[Listing]] = {
    ListingKind.PRODUCT: Product,
    ListingKind.HOUSE: House,
    ListingKind.SERVICE: Service,
}
_CREATE_MODELS: dict[ListingKind, type[BaseModel]] = {
    ListingKind.PRODUCT: ProductCreate,
    ListingKind.HOUSE: HouseCreate,
    ListingKind.SERVICE: ServiceCreate,
}
