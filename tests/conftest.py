from __future__ import annotations

import io
import itertools
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from campus_market.config import Settings, get_settings
from campus_market.main import app
from campus_market.models import Role
from campus_market.services.auth import AuthUser, get_auth_service
from campus_market.services.datastore import MemoryDataStore, get_datastore
from campus_market.services.exceptions import ConflictError, NotFoundError, UnauthorizedError
from campus_market.services.storage import get_storage_service
from campus_market.services.tables import PROFILES, USER_ROLES

ADMIN_EMAIL = "admin@campus.test"
ADMIN_PASSWORD = "s3cret-admin"


class FakeAuthService:
    """In-memory stand-in for Firebase Auth. Tokens look like ``token-<uid>``."""

    def __init__(self) -> None:
        self.users: dict[str, dict] = {}
        self._ids = itertools.count(1)

    def verify_token(self, id_token: str) -> AuthUser:
        uid = id_token.removeprefix("token-")
        if not id_token.startswith("token-") or uid not in self.users:
            raise UnauthorizedError("Invalid or expired token")
        return AuthUser(uid=uid, email=self.users[uid]["email"])

    def create_user(self, email: str, password: str, display_name: str) -> str:
        if self.find_user_by_email(email) is not None:
            raise ConflictError(f"An account already exists for {email}")
        uid = f"user-{next(self._ids)}"
        self.users[uid] = {"email": email, "password": password, "display_name": display_name}
        return uid

    def delete_user(self, uid: str) -> None:
        if self.users.pop(uid, None) is None:
            raise NotFoundError(f"No auth account {uid}")

    def find_user_by_email(self, email: str) -> Optional[str]:
        for uid, user in self.users.items():
            if user["email"] == email:
                return uid
        return None

    def password_reset_link(self, email: str) -> str:
        if self.find_user_by_email(email) is None:
            raise NotFoundError(f"No account for {email}")
        return f"https://reset.example/{email}"


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[tuple[str, bytes, str]] = []
        self.deleted_for: list[str] = []

    def upload_image(self, file_bytes: bytes, user_id: str, *, image_id=None, content_type="image/webp"):
        name = f"listings/{user_id}/img{len(self.uploads)}.webp"
        self.uploads.append((user_id, file_bytes, content_type))
        return f"gs://test-bucket/{name}", f"https://storage.example/{name}"

    def delete_user_images(self, user_id: str) -> int:
        self.deleted_for.append(user_id)
        return len([u for u in self.uploads if u[0] == user_id])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", color=(200, 40, 40)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def noisy_image_bytes(width: int, height: int, fmt: str = "PNG") -> bytes:
    noise = Image.effect_noise((width, height), 64).convert("RGB")
    buf = io.BytesIO()
    noise.save(buf, format=fmt)
    return buf.getvalue()


def make_user(
    store: MemoryDataStore,
    auth: FakeAuthService,
    role: Role,
    *,
    approved: bool = True,
    promoted: bool = False,
    email: Optional[str] = None,
    phone: Optional[str] = "0712345678",
    created_at: Optional[str] = None,
) -> str:
    """Create an auth account, profile and role row; return the uid."""

    email = email or f"{role.value}{len(auth.users) + 1}@campus.test"
    uid = auth.create_user(email, "password", role.value)
    store.insert(PROFILES, {"id": uid, "email": email, "full_name": role.value.title(), "phone_number": phone})
    role_row = {"user_id": uid, "role": role.value, "approved": approved, "promoted": promoted}
    if created_at:
        role_row["created_at"] = created_at
    store.insert(USER_ROLES, role_row)
    return uid


def auth_header(uid: str) -> dict[str, str]:
    return {"Authorization": f"Bearer token-{uid}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> MemoryDataStore:
    return MemoryDataStore()


@pytest.fixture
def auth() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        datastore_backend="memory",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        default_image_packaging="data_url",
        max_upload_bytes=2 * 1024 * 1024,
    )


@pytest.fixture
def client(store, auth, storage, settings):
    app.dependency_overrides[get_datastore] = lambda: store
    app.dependency_overrides[get_auth_service] = lambda: auth
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage_service] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
