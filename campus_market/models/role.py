from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .profile import Profile


class Role(str, Enum):
    """Who is looking at the marketplace. Resolved once per request."""

    GUEST = "guest"
    SELLER = "seller"
    LANDLORD = "landlord"
    SERVICE_PROVIDER = "service_provider"
    ADMIN = "admin"


# Roles a user may pick at sign-up; admins are only created by bootstrap.
SIGNUP_ROLES = (Role.SELLER, Role.LANDLORD, Role.SERVICE_PROVIDER)


class UserRole(BaseModel):
    id: str
    user_id: str
    role: Role
    approved: bool = False
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    promoted: bool = False
    promoted_at: Optional[datetime] = None
    promoted_by: Optional[str] = None
    created_at: datetime


class Viewer(BaseModel):
    uid: Optional[str] = None
    email: Optional[str] = None
    role: Role = Role.GUEST
    role_id: Optional[str] = None
    approved: bool = False
    promoted: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.uid is not None


class RoleMember(BaseModel):
    role: UserRole
    profile: Optional[Profile] = None


class RoleRoster(BaseModel):
    role: Role
    pending: list[RoleMember] = []
    approved: list[RoleMember] = []
