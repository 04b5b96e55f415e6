from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryKind(str, Enum):
    """What a category classifies, fixed when the category is created."""

    PRODUCT = "product"
    SERVICE = "service"
    HOUSE = "house"


class Category(BaseModel):
    id: str
    name: str
    kind: CategoryKind
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None
    created_at: datetime


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    kind: CategoryKind
    description: Optional[str] = Field(default=None, max_length=500)
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class Subcategory(BaseModel):
    id: str
    category_id: str
    name: str
    description: Optional[str] = None
    sort_order: Optional[int] = None
    created_at: datetime


class SubcategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    sort_order: Optional[int] = None
