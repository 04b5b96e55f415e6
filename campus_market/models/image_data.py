from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ImagePackaging = Literal["data_url", "upload"]


class ImageData(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    mime_type: str
    resolution: str | None = None  # e.g., "800x533"
    url: str  # data: URL, or signed / public GCS URL
    size_bytes: int = Field(..., ge=0)
    original_size_bytes: int = Field(..., ge=0)
