from __future__ import annotations

import pytest

from campus_market.config import Settings
from campus_market.services import storage as storage_module
from campus_market.services.storage import StorageService


class _Blob:
    def __init__(self, bucket: "_Bucket", name: str) -> None:
        self.bucket = bucket
        self.name = name
        self.cache_control = None
        self.deleted = False

    def upload_from_string(self, data: bytes, content_type: str) -> None:
        self.bucket.objects[self.name] = (data, content_type)

    def generate_signed_url(self, expires) -> str:
        return f"https://signed.example/{self.name}?expires={expires.days}d"

    def delete(self) -> None:
        self.bucket.objects.pop(self.name, None)


class _Bucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self.objects: dict[str, tuple[bytes, str]] = {}

    def blob(self, name: str) -> _Blob:
        return _Blob(self, name)


class _Client:
    def __init__(self) -> None:
        self.buckets: dict[str, _Bucket] = {}

    def bucket(self, name: str) -> _Bucket:
        return self.buckets.setdefault(name, _Bucket(name))

    def list_blobs(self, bucket: _Bucket, prefix: str):
        return [_Blob(bucket, name) for name in list(bucket.objects) if name.startswith(prefix)]


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    monkeypatch.setattr(storage_module, "get_settings", lambda: Settings(bucket_name="test-bucket", public_images=False))


def test_construction_does_not_need_cloud_credentials(monkeypatch):
    def _no_client(*args, **kwargs):
        raise AssertionError("storage client built too early")

    monkeypatch.setattr(storage_module.storage, "Client", _no_client)
    StorageService()


def test_upload_uses_user_prefix_and_signed_url():
    client = _Client()
    service = StorageService(client=client)

    gs_path, url = service.upload_image(b"webp-bytes", "user-1", image_id="abc")

    bucket = client.bucket("test-bucket")
    assert bucket.objects["listings/user-1/abc.webp"] == (b"webp-bytes", "image/webp")
    assert gs_path == "gs://test-bucket/listings/user-1/abc.webp"
    assert url.startswith("https://signed.example/listings/user-1/abc.webp")


def test_upload_rejects_non_image_content_type():
    with pytest.raises(ValueError):
        StorageService(client=_Client()).upload_image(b"x", "user-1", content_type="text/plain")


def test_delete_user_images_only_touches_that_user():
    client = _Client()
    service = StorageService(client=client)
    service.upload_image(b"a", "user-1", image_id="one")
    service.upload_image(b"b", "user-1", image_id="two")
    service.upload_image(b"c", "user-2", image_id="three")

    assert service.delete_user_images("user-1") == 2
    assert list(client.bucket("test-bucket").objects) == ["listings/user-2/three.webp"]
