"""Request dependencies: data store, services and the current viewer."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException

from campus_market.config import Settings, get_settings
from campus_market.models import Role, Viewer
from campus_market.services.accounts import AccountService
from campus_market.services.auth import FirebaseAuthService, get_auth_service
from campus_market.services.datastore import DataStore, get_datastore
from campus_market.services.listings import ListingService

logger = logging.getLogger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization is None:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Malformed Authorization header")
    return token.strip()


def get_viewer(
    authorization: Optional[str] = Header(None),
    store: DataStore = Depends(get_datastore),
    auth_service: FirebaseAuthService = Depends(get_auth_service),
) -> Viewer:
    """Resolve who is calling. No token means a guest."""

    token = _bearer_token(authorization)
    user = auth_service.verify_token(token) if token else None
    return AccountService(store).resolve_viewer(user)


def require_roles(*roles: Role) -> Callable[..., Viewer]:
    """Dependency factory: signed-in viewer, optionally limited to *roles*."""

    def _dependency(viewer: Viewer = Depends(get_viewer)) -> Viewer:
        if not viewer.is_authenticated:
            raise HTTPException(status_code=401, detail="Sign in required")
        if roles and viewer.role not in roles:
            raise HTTPException(status_code=403, detail="You don't have access to this page.")
        return viewer

    return _dependency


require_signed_in = require_roles()
require_admin = require_roles(Role.ADMIN)
require_owner = require_roles(Role.SELLER, Role.LANDLORD, Role.SERVICE_PROVIDER)


def get_listing_service(
    store: DataStore = Depends(get_datastore),
    settings: Settings = Depends(get_settings),
) -> ListingService:
    return ListingService(store, country_code=settings.whatsapp_country_code)
