from __future__ import annotations

import logging
from typing import Optional

from campus_market.models import Category, CategoryCreate, CategoryKind, Subcategory, SubcategoryCreate
from campus_market.services.datastore import DataStore
from campus_market.services.exceptions import InvalidRequestError, NotFoundError
from campus_market.services.tables import CATEGORIES, SUBCATEGORIES

logger = logging.getLogger(__name__)


def _sort_key(item: Category | Subcategory) -> tuple[bool, int, str]:
    # Unordered entries go last, then alphabetical
    return (item.sort_order is None, item.sort_order or 0, item.name.lower())


class CategoryService:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    def list_categories(self, kind: Optional[CategoryKind] = None) -> list[Category]:
        filters = {"kind": kind} if kind is not None else None
        rows = self._store.query(CATEGORIES, filters=filters)
        return sorted((Category.model_validate(r) for r in rows), key=_sort_key)

    def get_category(self, category_id: str) -> Category:
        row = self._store.get(CATEGORIES, category_id)
        if row is None:
            raise NotFoundError(f"Category {category_id} not found")
        return Category.model_validate(row)

    def create_category(self, data: CategoryCreate) -> Category:
        row = self._store.insert(CATEGORIES, data.model_dump(mode="json"))
        logger.info("Created %s category %r", data.kind.value, data.name)
        return Category.model_validate(row)

    def list_subcategories(self, category_id: str) -> list[Subcategory]:
        self.get_category(category_id)
        rows = self._store.query(SUBCATEGORIES, filters={"category_id": category_id})
        return sorted((Subcategory.model_validate(r) for r in rows), key=_sort_key)

    def create_subcategory(self, category_id: str, data: SubcategoryCreate) -> Subcategory:
        self.get_category(category_id)
        row = self._store.insert(SUBCATEGORIES, {**data.model_dump(mode="json"), "category_id": category_id})
        return Subcategory.model_validate(row)

    def check_assignment(
        self,
        kind: CategoryKind,
        category_id: Optional[str],
        subcategory_id: Optional[str],
    ) -> None:
        """Reject category links that do not fit a listing of *kind*."""

        if subcategory_id and not category_id:
            raise InvalidRequestError("subcategory_id requires category_id")
        if not category_id:
            return
        row = self._store.get(CATEGORIES, category_id)
        if row is None:
            raise InvalidRequestError(f"Unknown category {category_id}")
        if row.get("kind") != kind.value:
            raise InvalidRequestError(f"Category {row.get('name')!r} is not a {kind.value} category")
        if subcategory_id:
            sub = self._store.get(SUBCATEGORIES, subcategory_id)
            if sub is None or sub.get("category_id") != category_id:
                raise InvalidRequestError(f"Subcategory {subcategory_id} does not belong to category {category_id}")
