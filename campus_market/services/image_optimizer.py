"""Image optimization before persistence.

Listing photos are decoded, shrunk to fit a named size profile and
re-encoded as WebP. The optimizer only produces bytes: callers decide
whether to store the result inline as a ``data:`` URL or to upload it to
Cloud Storage (see :mod:`campus_market.services.storage`).

Size profiles::

    product    800 x 800   q=0.85
    service    800 x 800   q=0.85
    house     1200 x 900   q=0.85
    thumbnail  400 x 400   q=0.80
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import math
import re
from typing import Literal

from PIL import Image, ImageOps, UnidentifiedImageError, features
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

TARGET_FORMAT = "WEBP"
TARGET_MIME_TYPE = "image/webp"

ProfileName = Literal["product", "service", "house", "thumbnail"]

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]+);base64,(?P<payload>.+)$", re.DOTALL)


class ImageOptimizationError(Exception):
    """Base class for optimizer failures."""


class DecodeError(ImageOptimizationError):
    """Input bytes are not a recognizable still image."""


class EncodeError(ImageOptimizationError):
    """The WebP encoder is unavailable or rejected the target parameters."""


class SizeProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_width: int = Field(..., gt=0)
    max_height: int = Field(..., gt=0)
    quality: float = Field(..., gt=0, le=1)

    @property
    def encoder_quality(self) -> int:
        # Pillow takes 1..100
        return max(1, min(100, int(round(self.quality * 100))))


SIZE_PROFILES: dict[str, SizeProfile] = {
    "product": SizeProfile(max_width=800, max_height=800, quality=0.85),
    "service": SizeProfile(max_width=800, max_height=800, quality=0.85),
    "house": SizeProfile(max_width=1200, max_height=900, quality=0.85),
    "thumbnail": SizeProfile(max_width=400, max_height=400, quality=0.80),
}


def get_profile(name: str) -> SizeProfile:
    try:
        return SIZE_PROFILES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown size profile: {name}") from exc


class OptimizedImage(BaseModel):
    """Encoded WebP bytes plus the dimensions that went into them."""

    data: bytes
    width: int
    height: int
    original_width: int
    original_height: int
    original_size: int
    mime_type: str = TARGET_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_dimensions(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Return the target (width, height) for an image of the given size.

    Images already inside the box are left alone. Larger ones are scaled
    from their longer side (width wins ties), keeping the aspect ratio.
    """

    if width <= max_width and height <= max_height:
        return width, height

    ratio = width / height
    if width >= height:
        target_w = float(min(width, max_width))
        target_h = target_w / ratio
    else:
        target_h = float(min(height, max_height))
        target_w = target_h * ratio

    # A non-square box can leave the other side out of bounds.
    if target_h > max_height:
        target_h = float(max_height)
        target_w = target_h * ratio
    if target_w > max_width:
        target_w = float(max_width)
        target_h = target_w / ratio

    return _round_half_up(target_w), _round_half_up(target_h)


# ---------------------------------------------------------------------------
# Codec steps
# ---------------------------------------------------------------------------


def _decode(data: bytes) -> Image.Image:
    if not data:
        raise DecodeError("Empty image payload")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc
    return img


def _normalise_mode(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    if img.mode == "P":
        return img.convert("RGBA" if "transparency" in img.info else "RGB")
    if img.mode in ("LA", "La", "PA", "RGBa"):
        return img.convert("RGBA")
    return img.convert("RGB")


def _encode(img: Image.Image, quality: int) -> bytes:
    if not features.check("webp"):
        raise EncodeError("WebP encoder is not available in this Pillow build")
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=TARGET_FORMAT, quality=quality, method=4)
    except (KeyError, OSError, ValueError) as exc:
        raise EncodeError(f"WebP encoding failed: {exc}") from exc
    return buffer.getvalue()


def optimize_image(data: bytes, profile: SizeProfile | str) -> OptimizedImage:
    """Resize *data* to fit *profile* and re-encode it as WebP.

    Raises
    ------
    DecodeError
        The payload is not a still image Pillow can read.
    EncodeError
        The target surface is empty or the encoder refused it.
    """

    if isinstance(profile, str):
        profile = get_profile(profile)

    with _decode(data) as source:
        try:
            oriented = ImageOps.exif_transpose(source)
        except (OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(f"Could not apply EXIF orientation: {exc}") from exc

        width, height = oriented.size
        target = calculate_dimensions(width, height, profile.max_width, profile.max_height)
        if target[0] < 1 or target[1] < 1:
            raise EncodeError(f"Target surface {target[0]}x{target[1]} has zero area")

        surface = _normalise_mode(oriented)
        if target != (width, height):
            surface = surface.resize(target, Image.Resampling.LANCZOS)
        encoded = _encode(surface, profile.encoder_quality)

    logger.info(
        "Image optimized: %dx%d %.1fKB -> %dx%d %.1fKB",
        width,
        height,
        len(data) / 1024,
        target[0],
        target[1],
        len(encoded) / 1024,
    )
    return OptimizedImage(
        data=encoded,
        width=target[0],
        height=target[1],
        original_width=width,
        original_height=height,
        original_size=len(data),
    )


# ---------------------------------------------------------------------------
# Data URL packaging
# ---------------------------------------------------------------------------


def to_data_url(data: bytes, mime_type: str = TARGET_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def parse_data_url(url: str) -> tuple[str, bytes]:
    """Split a base64 ``data:`` URL into (mime_type, payload bytes)."""

    match = _DATA_URL_RE.match(url.strip())
    if match is None:
        raise DecodeError("Invalid base64 data URL")
    try:
        payload = base64.b64decode(match["payload"], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload: {exc}") from exc
    return match["mime"], payload


def is_image_data_url(url: str | None) -> bool:
    return bool(url) and url.startswith("data:image/")


def is_webp_data_url(url: str | None) -> bool:
    return bool(url) and url.startswith(f"data:{TARGET_MIME_TYPE}")
