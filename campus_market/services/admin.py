"""Admin console operations.

Approval and promotion of sellers, landlords and service providers,
account removal and the one-off admin bootstrap.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import BaseModel

from campus_market.models import ListingKind, Profile, Role, RoleMember, RoleRoster, UserRole
from campus_market.services.datastore import DataStore
from campus_market.services.exceptions import ConflictError, InvalidRequestError, NotFoundError
from campus_market.services.tables import PROFILES, USER_ROLES

logger = logging.getLogger(__name__)


class AdminAuthGateway(Protocol):
    def create_user(self, email: str, password: str, display_name: str) -> str: ...

    def delete_user(self, uid: str) -> None: ...

    def find_user_by_email(self, email: str) -> Optional[str]: ...

    def password_reset_link(self, email: str) -> str: ...


class ImageCleaner(Protocol):
    def delete_user_images(self, user_id: str) -> int: ...


class BootstrapResult(BaseModel):
    created: bool
    message: str
    email: str


class DeletionReport(BaseModel):
    uid: str
    roles: int = 0
    listings: dict[str, int] = {}
    images: int = 0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AdminService:
    def __init__(
        self,
        store: DataStore,
        auth_gateway: AdminAuthGateway,
        image_cleaner: Optional[ImageCleaner] = None,
    ) -> None:
        self._store = store
        self._auth = auth_gateway
        self._images = image_cleaner

    # -------------------------------------------------------------------
    # Approval & promotion
    # -------------------------------------------------------------------

    def roster(self, role: Role) -> RoleRoster:
        if role is Role.GUEST:
            raise InvalidRequestError("Guests have no role rows")
        rows = self._store.query(USER_ROLES, filters={"role": role}, order_by="created_at")
        roster = RoleRoster(role=role)
        for row in rows:
            user_role = UserRole.model_validate(row)
            profile_row = self._store.get(PROFILES, user_role.user_id)
            member = RoleMember(
                role=user_role,
                profile=Profile.model_validate(profile_row) if profile_row else None,
            )
            (roster.approved if user_role.approved else roster.pending).append(member)
        return roster

    def approve(self, role_id: str, admin_uid: str) -> UserRole:
        role = self._set(role_id, {"approved": True, "approved_at": _now(), "approved_by": admin_uid})
        logger.info("Admin %s approved %s %s", admin_uid, role.role.value, role.user_id)
        return role

    def revoke(self, role_id: str) -> UserRole:
        role = self._set(role_id, {"approved": False, "approved_at": None, "approved_by": None})
        logger.info("Approval revoked for %s %s", role.role.value, role.user_id)
        return role

    def promote(self, role_id: str, admin_uid: str) -> UserRole:
        return self._set(role_id, {"promoted": True, "promoted_at": _now(), "promoted_by": admin_uid})

    def unpromote(self, role_id: str) -> UserRole:
        return self._set(role_id, {"promoted": False, "promoted_at": None, "promoted_by": None})

    def promoted(self) -> list[UserRole]:
        rows = self._store.query(USER_ROLES, filters={"promoted": True}, order_by="promoted_at", descending=True)
        return [UserRole.model_validate(r) for r in rows]

    def _set(self, role_id: str, changes: dict) -> UserRole:
        row = self._store.update(USER_ROLES, role_id, changes)
        if row is None:
            raise NotFoundError(f"Role {role_id} not found")
        return UserRole.model_validate(row)

    # -------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------

    def delete_user(self, uid: str, *, acting_admin_uid: str) -> DeletionReport:
        """Remove an account and everything it owns."""

        if uid == acting_admin_uid:
            raise InvalidRequestError("Admins cannot delete their own account")

        try:
            self._auth.delete_user(uid)
        except NotFoundError:
            logger.warning("Auth account %s already gone; cleaning up data only", uid)

        report = DeletionReport(uid=uid)
        for row in self._store.query(USER_ROLES, filters={"user_id": uid}):
            self._store.delete(USER_ROLES, row["id"])
            report.roles += 1
        for kind in ListingKind:
            owned = self._store.query(kind.table, filters={kind.owner_field: uid})
            for row in owned:
                self._store.delete(kind.table, row["id"])
            report.listings[kind.value] = len(owned)
        self._store.delete(PROFILES, uid)
        if self._images is not None:
            report.images = self._images.delete_user_images(uid)

        logger.info("Deleted user %s: %s", uid, report.model_dump())
        return report

    def password_reset_link(self, email: str) -> str:
        return self._auth.password_reset_link(email)

    def bootstrap_admin(self, email: Optional[str], password: Optional[str]) -> BootstrapResult:
        """Create the configured admin account once; later calls are no-ops."""

        if not email or not password:
            raise InvalidRequestError("Admin credentials are not configured")

        existing_uid = self._auth.find_user_by_email(email)
        if existing_uid is not None:
            self._ensure_admin_rows(existing_uid, email)
            return BootstrapResult(created=False, message="Admin user already exists", email=email)

        uid = self._auth.create_user(email, password, "Admin")
        self._ensure_admin_rows(uid, email)
        logger.info("Bootstrapped admin account %s", uid)
        return BootstrapResult(created=True, message="Admin user created successfully", email=email)

    def _ensure_admin_rows(self, uid: str, email: str) -> None:
        rows = self._store.query(USER_ROLES, filters={"user_id": uid})
        admin_rows = [r for r in rows if r.get("role") == Role.ADMIN.value]
        other_roles = sorted({r.get("role") for r in rows} - {Role.ADMIN.value})
        if other_roles:
            raise ConflictError(f"{email} is already registered as {', '.join(other_roles)}; pick another admin email")
        if self._store.get(PROFILES, uid) is None:
            self._store.insert(PROFILES, {"id": uid, "email": email, "full_name": "Admin", "phone_number": None})
        if not admin_rows:
            self._store.insert(
                USER_ROLES,
                {
                    "user_id": uid,
                    "role": Role.ADMIN.value,
                    "approved": True,
                    "approved_at": _now(),
                    "approved_by": uid,
                    "promoted": False,
                },
            )
        elif not admin_rows[0].get("approved"):
            self._set(admin_rows[0]["id"], {"approved": True, "approved_at": _now(), "approved_by": uid})
