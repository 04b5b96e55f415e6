"""Batch re-encoding of inline listing photos stored before optimization.

Rows whose ``photo_url`` is a ``data:image/...`` URL in any format other
than WebP are decoded, shrunk with the listing kind's size profile and
written back as WebP data URLs, a few rows per call.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from campus_market.models import ListingKind
from campus_market.services.datastore import DataStore
from campus_market.services.image_optimizer import (
    ImageOptimizationError,
    is_image_data_url,
    is_webp_data_url,
    optimize_image,
    parse_data_url,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


class BatchOptimizeResult(BaseModel):
    table: str
    message: str
    processed: int
    remaining: int
    errors: list[str] = []


def pending_rows(store: DataStore, kind: ListingKind) -> list[dict[str, Any]]:
    rows = store.query(kind.table, order_by="created_at")
    return [
        r for r in rows
        if is_image_data_url(r.get("photo_url")) and not is_webp_data_url(r.get("photo_url"))
    ]


def optimize_stored_images(
    store: DataStore,
    kind: ListingKind,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> BatchOptimizeResult:
    pending = pending_rows(store, kind)
    if not pending:
        return BatchOptimizeResult(
            table=kind.table,
            message="All images are already optimized!",
            processed=0,
            remaining=0,
        )

    batch = pending[:batch_size]
    logger.info("Found %d images to optimize in %s (%d pending)", len(batch), kind.table, len(pending))

    processed = 0
    errors: list[str] = []
    for row in batch:
        original = row["photo_url"]
        try:
            _, payload = parse_data_url(original)
            optimized = optimize_image(payload, kind.image_profile).to_data_url()
        except ImageOptimizationError as exc:
            message = f"Error on {row['id']}: {exc}"
            logger.warning(message)
            errors.append(message)
            continue

        store.update(kind.table, row["id"], {"photo_url": optimized})
        processed += 1
        logger.info(
            "Optimized %s/%s: %.1fKB -> %.1fKB",
            kind.table,
            row["id"],
            len(original) / 1024,
            len(optimized) / 1024,
        )

    return BatchOptimizeResult(
        table=kind.table,
        message=f"Optimized {processed}/{len(batch)} images",
        processed=processed,
        remaining=len(pending) - processed,
        errors=errors,
    )
