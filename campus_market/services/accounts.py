"""Accounts: sign-up, profiles and per-request viewer resolution."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from campus_market.models import SIGNUP_ROLES, Profile, ProfileUpdate, Role, SignupRequest, UserRole, Viewer
from campus_market.services.auth import AuthUser
from campus_market.services.datastore import DataStore
from campus_market.services.exceptions import InvalidRequestError, NotFoundError
from campus_market.services.tables import PROFILES, USER_ROLES

logger = logging.getLogger(__name__)


class AccountGateway(Protocol):
    def create_user(self, email: str, password: str, display_name: str) -> str: ...

    def delete_user(self, uid: str) -> None: ...


def promoted_user_ids(store: DataStore) -> set[str]:
    rows = store.query(USER_ROLES, filters={"promoted": True})
    return {r["user_id"] for r in rows}


def role_for_user(store: DataStore, uid: str) -> Optional[UserRole]:
    rows = store.query(USER_ROLES, filters={"user_id": uid}, order_by="created_at")
    if not rows:
        return None
    if len(rows) > 1:
        logger.warning("User %s has %d role rows; using the oldest", uid, len(rows))
    return UserRole.model_validate(rows[0])


class AccountService:
    def __init__(self, store: DataStore, auth_gateway: Optional[AccountGateway] = None) -> None:
        self._store = store
        self._auth = auth_gateway

    def resolve_viewer(self, user: Optional[AuthUser]) -> Viewer:
        if user is None:
            return Viewer()
        role = role_for_user(self._store, user.uid)
        if role is None:
            return Viewer(uid=user.uid, email=user.email)
        return Viewer(
            uid=user.uid,
            email=user.email,
            role=role.role,
            role_id=role.id,
            approved=bool(role.approved),
            promoted=bool(role.promoted),
        )

    def signup(self, request: SignupRequest) -> tuple[Profile, UserRole]:
        try:
            role = Role(request.role)
        except ValueError as exc:
            raise InvalidRequestError(f"Unknown role: {request.role}") from exc
        if role not in SIGNUP_ROLES:
            raise InvalidRequestError(f"Cannot sign up as {role.value}")
        if self._auth is None:
            raise RuntimeError("AccountService needs an auth gateway for sign-up")

        uid = self._auth.create_user(request.email, request.password, request.full_name)
        try:
            profile_row = self._store.insert(
                PROFILES,
                {
                    "id": uid,
                    "email": request.email,
                    "full_name": request.full_name,
                    "phone_number": request.phone_number,
                },
            )
            role_row = self._store.insert(
                USER_ROLES,
                {"user_id": uid, "role": role.value, "approved": False, "promoted": False},
            )
        except Exception:
            logger.exception("Sign-up failed after creating auth user %s; rolling back", uid)
            self._auth.delete_user(uid)
            raise

        logger.info("Signed up %s as %s (pending approval)", uid, role.value)
        return Profile.model_validate(profile_row), UserRole.model_validate(role_row)

    def get_profile(self, uid: str) -> Optional[Profile]:
        row = self._store.get(PROFILES, uid)
        return Profile.model_validate(row) if row else None

    def update_profile(self, uid: str, update: ProfileUpdate) -> Profile:
        row = self._store.update(PROFILES, uid, update.model_dump(mode="json"))
        if row is None:
            raise NotFoundError("Profile not found")
        return Profile.model_validate(row)
