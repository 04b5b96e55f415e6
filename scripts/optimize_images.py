#!/usr/bin/env python
"""Re-encode stored inline listing photos as WebP, batch by batch."""
from __future__ import annotations

import argparse
import logging

from campus_market.models import ListingKind
from campus_market.services.datastore import get_datastore
from campus_market.services.image_batch import DEFAULT_BATCH_SIZE, optimize_stored_images


def main() -> None:
    parser = argparse.ArgumentParser(description="Optimize stored listing images")
    parser.add_argument("--kind", choices=[k.value for k in ListingKind], action="append")
    parser.add_argument("--batch_size", type=int, default=DEFAULT_BATCH_SIZE)
    parser.add_argument("--all", action="store_true", help="Keep going until nothing is left")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    store = get_datastore()
    kinds = [ListingKind(k) for k in args.kind] if args.kind else list(ListingKind)
    for kind in kinds:
        while True:
            result = optimize_stored_images(store, kind, args.batch_size)
            print(f"{kind.table}: {result.message} ({result.remaining} remaining)")
            for error in result.errors:
                print(f"  {error}")
            # Rows that keep failing stay pending; stop once a batch makes no progress.
            if not args.all or result.remaining == 0 or result.processed == 0:
                break


if __name__ == "__main__":
    main()
