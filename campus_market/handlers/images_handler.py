"""Image upload endpoint.

The browser posts the raw file; the server resizes it with the requested
size profile, re-encodes as WebP and either returns a data URL or stores
the bytes in Cloud Storage.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from campus_market.config import Settings, get_settings
from campus_market.models import ImageData, ImagePackaging, Viewer
from campus_market.services.image_optimizer import SIZE_PROFILES, optimize_image
from campus_market.services.storage import StorageService, get_storage_service

from .deps import require_signed_in

router = APIRouter(prefix="/images", tags=["images"])
logger = logging.getLogger(__name__)


@router.post("/optimize", response_model=ImageData)
async def optimize(
    file: UploadFile = File(...),
    profile: str = Form("product"),
    packaging: Optional[ImagePackaging] = Form(None),
    viewer: Viewer = Depends(require_signed_in),
    settings: Settings = Depends(get_settings),
    storage: StorageService = Depends(get_storage_service),
):
    if profile not in SIZE_PROFILES:
        raise HTTPException(status_code=400, detail=f"Unknown size profile '{profile}'")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    optimized = await run_in_threadpool(optimize_image, data, profile)
    packaging = packaging or settings.default_image_packaging

    if packaging == "upload":
        _, url = await run_in_threadpool(
            storage.upload_image, optimized.data, viewer.uid, content_type=optimized.mime_type
        )
    else:
        url = optimized.to_data_url()

    logger.info(
        "Optimized %s for %s: %dx%d -> %dx%d",
        file.filename,
        viewer.uid,
        optimized.original_width,
        optimized.original_height,
        optimized.width,
        optimized.height,
    )
    return ImageData(
        width=optimized.width,
        height=optimized.height,
        mime_type=optimized.mime_type,
        resolution=f"{optimized.width}x{optimized.height}",
        url=url,
        size_bytes=optimized.size,
        original_size_bytes=optimized.original_size,
    )
