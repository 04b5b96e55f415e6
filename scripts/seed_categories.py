#!/usr/bin/env python
"""Insert the default category set. Existing names of the same kind are skipped."""
from __future__ import annotations

import argparse

from campus_market.models import CategoryCreate, CategoryKind
from campus_market.services.categories import CategoryService
from campus_market.services.datastore import get_datastore

DEFAULT_CATEGORIES: dict[CategoryKind, list[str]] = {
    CategoryKind.PRODUCT: [
        "Electronics",
        "Books & Stationery",
        "Fashion & Clothing",
        "Furniture & Home",
        "Kitchen & Food",
        "Sports & Fitness",
        "Beauty & Cosmetics",
        "Other Products",
    ],
    CategoryKind.SERVICE: [
        "Tech & Digital Services",
        "Academic Support",
        "Personal Care & Lifestyle",
        "Transport & Logistics",
        "Entertainment and Events",
        "Wellness & Support",
        "Financial Services",
        "Creative & Innovation Services",
        "Health & Personal Care",
        "Transport & Mobility",
        "Entertainment & Hobbies",
        "Repair and Maintenance",
        "Campus Events",
    ],
    CategoryKind.HOUSE: [
        "Single Room",
        "Bedsitter",
        "One Bedroom",
    ],
}


def seed(service: CategoryService, kinds: list[CategoryKind]) -> int:
    created = 0
    for kind in kinds:
        existing = {c.name for c in service.list_categories(kind)}
        for order, name in enumerate(DEFAULT_CATEGORIES[kind], start=1):
            if name in existing:
                continue
            service.create_category(CategoryCreate(name=name, kind=kind, sort_order=order))
            created += 1
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed marketplace categories")
    parser.add_argument("--kind", choices=[k.value for k in CategoryKind], action="append")
    args = parser.parse_args()

    kinds = [CategoryKind(k) for k in args.kind] if args.kind else list(CategoryKind)
    created = seed(CategoryService(get_datastore()), kinds)
    print(f"Created {created} categories")


if __name__ == "__main__":
    main()
