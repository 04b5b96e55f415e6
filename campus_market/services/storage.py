"""Google Cloud Storage helper for listing images.

Optimized WebP images are stored under the following key pattern:

    listings/{user_id}/{image_id}.webp

Callers receive both the *gs://* path and an externally accessible URL
(signed or public depending on configuration).
"""
from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from functools import cached_property, lru_cache
from typing import Optional, Tuple

from google.cloud import storage

from campus_market.config import get_settings
from campus_market.services.image_optimizer import TARGET_MIME_TYPE

logger = logging.getLogger(__name__)


class StorageService:  # pylint: disable=too-few-public-methods
    """Wrapper around Google Cloud Storage uploads and signed URLs."""

    _VALID_IMAGE_PREFIX = "image/"

    def __init__(self, client: Optional[storage.Client] = None) -> None:
        self._settings = get_settings()
        self._client_override = client

    @cached_property
    def _client(self) -> storage.Client:
        # Built on first upload so data-URL requests never need GCS credentials.
        return self._client_override or storage.Client(project=self._settings.project_id)

    @cached_property
    def _bucket(self) -> storage.Bucket:
        return self._client.bucket(self._settings.bucket_name)

    def upload_image(
        self,
        file_bytes: bytes,
        user_id: str,
        *,
        image_id: Optional[str] = None,
        content_type: str = TARGET_MIME_TYPE,
    ) -> Tuple[str, str]:
        """Upload already-optimized image bytes and return (gs_path, url)."""

        if not content_type.startswith(self._VALID_IMAGE_PREFIX):
            raise ValueError("Unsupported content_type; expected image/*, got %s" % content_type)

        ext = _content_type_to_extension(content_type)
        blob_name = f"listings/{user_id}/{image_id or uuid.uuid4().hex}.{ext}"
        blob = self._bucket.blob(blob_name)
        blob.cache_control = "public, max-age=31536000"
        blob.upload_from_string(file_bytes, content_type=content_type)

        expires = timedelta(days=self._settings.signed_url_days)
        if self._settings.public_images:
            try:
                blob.make_public()
                url = blob.public_url
            except Exception as exc:  # pragma: no cover
                logger.error("Failed to make blob public: %s", exc)
                url = blob.generate_signed_url(expires)
        else:
            url = blob.generate_signed_url(expires)

        gs_path = f"gs://{self._settings.bucket_name}/{blob_name}"
        logger.debug("Uploaded image to %s", gs_path)
        return gs_path, url

    def delete_user_images(self, user_id: str) -> int:
        deleted = 0
        for blob in self._client.list_blobs(self._bucket, prefix=f"listings/{user_id}/"):
            blob.delete()
            deleted += 1
        if deleted:
            logger.info("Deleted %d image blobs for user %s", deleted, user_id)
        return deleted


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def _content_type_to_extension(content_type: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
    }
    return mapping.get(content_type.lower(), "webp")


@lru_cache()
def get_storage_service() -> StorageService:
    return StorageService()
