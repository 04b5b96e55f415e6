#!/usr/bin/env python
"""Convert legacy free-text prices ("500 - 800", "KSh 1,200") to price ranges."""
from __future__ import annotations

import argparse
from typing import Any, Optional

from campus_market.models import ListingKind
from campus_market.services.datastore import DataStore, get_datastore
from campus_market.utils.pricing import parse_price_text


def migrated_price(value: Any) -> Optional[dict[str, Any]]:
    """New value for a stored price, or ``None`` when it needs no change."""

    if isinstance(value, dict):
        return None
    if isinstance(value, (int, float)):
        return {"min": float(value), "max": float(value)}
    low, high = parse_price_text(str(value))
    return {"min": low, "max": high}


def migrate(store: DataStore, kind: ListingKind, *, dry_run: bool = False) -> tuple[int, list[str]]:
    field = kind.price_field
    changed = 0
    failures: list[str] = []
    for row in store.query(kind.table):
        try:
            new_value = migrated_price(row.get(field))
        except ValueError:
            failures.append(row["id"])
            continue
        if new_value is None:
            continue
        if not dry_run:
            store.update(kind.table, row["id"], {field: new_value})
        changed += 1
    return changed, failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate legacy price strings")
    parser.add_argument("--dry_run", action="store_true")
    args = parser.parse_args()

    store = get_datastore()
    for kind in ListingKind:
        changed, failures = migrate(store, kind, dry_run=args.dry_run)
        print(f"{kind.table}: {changed} rows migrated")
        for row_id in failures:
            print(f"  could not parse price on {row_id}")


if __name__ == "__main__":
    main()
