"""Firebase Authentication gateway.

Token verification for incoming requests plus the privileged account
operations the admin console and sign-up flow need.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from firebase_admin import auth
from pydantic import BaseModel

from campus_market.services.exceptions import ConflictError, NotFoundError, UnauthorizedError
from campus_market.services.firebase_app import ensure_firebase_app

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    uid: str
    email: Optional[str] = None


class FirebaseAuthService:
    """Thin wrapper around ``firebase_admin.auth``."""

    def __init__(self) -> None:
        self._app = ensure_firebase_app()

    def verify_token(self, id_token: str) -> AuthUser:
        try:
            claims = auth.verify_id_token(id_token, app=self._app)
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError, ValueError) as exc:
            logger.warning("Rejected ID token: %s", exc)
            raise UnauthorizedError("Invalid or expired token") from exc
        return AuthUser(uid=claims["uid"], email=claims.get("email"))

    def create_user(self, email: str, password: str, display_name: str) -> str:
        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                email_verified=False,
                app=self._app,
            )
        except auth.EmailAlreadyExistsError as exc:
            raise ConflictError("An account with this email already exists") from exc
        logger.info("Created auth user %s", record.uid)
        return record.uid

    def delete_user(self, uid: str) -> None:
        try:
            auth.delete_user(uid, app=self._app)
        except auth.UserNotFoundError as exc:
            raise NotFoundError(f"User {uid} not found") from exc
        logger.info("Deleted auth user %s", uid)

    def find_user_by_email(self, email: str) -> Optional[str]:
        try:
            return auth.get_user_by_email(email, app=self._app).uid
        except auth.UserNotFoundError:
            return None

    def password_reset_link(self, email: str) -> str:
        try:
            return auth.generate_password_reset_link(email, app=self._app)
        except auth.UserNotFoundError as exc:
            raise NotFoundError("No account with this email") from exc


@lru_cache()
def get_auth_service() -> FirebaseAuthService:
    return FirebaseAuthService()
