from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from campus_market.models import Category, CategoryCreate, CategoryKind, Subcategory, SubcategoryCreate, Viewer
from campus_market.services.categories import CategoryService
from campus_market.services.datastore import DataStore, get_datastore

from .deps import require_admin

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[Category])
def list_categories(kind: Optional[CategoryKind] = None, store: DataStore = Depends(get_datastore)):
    return CategoryService(store).list_categories(kind)


@router.post("", response_model=Category, status_code=201)
def create_category(
    data: CategoryCreate,
    _: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
):
    return CategoryService(store).create_category(data)


@router.get("/{category_id}/subcategories", response_model=list[Subcategory])
def list_subcategories(category_id: str, store: DataStore = Depends(get_datastore)):
    return CategoryService(store).list_subcategories(category_id)


@router.post("/{category_id}/subcategories", response_model=Subcategory, status_code=201)
def create_subcategory(
    category_id: str,
    data: SubcategoryCreate,
    _: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
):
    return CategoryService(store).create_subcategory(category_id, data)
