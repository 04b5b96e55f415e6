"""Admin console endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from campus_market.config import Settings, get_settings
from campus_market.models import (
    ContactStatus,
    ContactStatusUpdate,
    ContactSubmission,
    ListingKind,
    PasswordResetRequest,
    Role,
    RoleRoster,
    UserRole,
    Viewer,
)
from campus_market.services.admin import AdminService, BootstrapResult, DeletionReport, ImageCleaner
from campus_market.services.auth import FirebaseAuthService, get_auth_service
from campus_market.services.contact import ContactService
from campus_market.services.datastore import DataStore, get_datastore
from campus_market.services.image_batch import DEFAULT_BATCH_SIZE, BatchOptimizeResult, optimize_stored_images
from campus_market.services.storage import get_storage_service

from .deps import require_admin

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def get_admin_service(
    store: DataStore = Depends(get_datastore),
    auth_service: FirebaseAuthService = Depends(get_auth_service),
) -> AdminService:
    return AdminService(store, auth_service)


# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------


@router.post("/setup", response_model=BootstrapResult)
def setup_admin(
    admin: AdminService = Depends(get_admin_service),
    settings: Settings = Depends(get_settings),
):
    return admin.bootstrap_admin(settings.admin_email, settings.admin_password)


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


@router.get("/roles/{role}", response_model=RoleRoster)
def roster(role: Role, _: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.roster(role)


@router.post("/roles/{role_id}/approve", response_model=UserRole)
def approve(role_id: str, viewer: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.approve(role_id, viewer.uid)


@router.post("/roles/{role_id}/revoke", response_model=UserRole)
def revoke(role_id: str, _: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.revoke(role_id)


@router.post("/roles/{role_id}/promote", response_model=UserRole)
def promote(role_id: str, viewer: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.promote(role_id, viewer.uid)


@router.post("/roles/{role_id}/unpromote", response_model=UserRole)
def unpromote(role_id: str, _: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.unpromote(role_id)


@router.get("/promoted", response_model=list[UserRole])
def promoted(_: Viewer = Depends(require_admin), admin: AdminService = Depends(get_admin_service)):
    return admin.promoted()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.delete("/users/{uid}", response_model=DeletionReport)
def delete_user(
    uid: str,
    viewer: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
    auth_service: FirebaseAuthService = Depends(get_auth_service),
    image_cleaner: ImageCleaner = Depends(get_storage_service),
):
    admin = AdminService(store, auth_service, image_cleaner)
    return admin.delete_user(uid, acting_admin_uid=viewer.uid)


@router.post("/password-reset")
def password_reset(
    request: PasswordResetRequest,
    _: Viewer = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
):
    return {"email": request.email, "link": admin.password_reset_link(request.email)}


# ---------------------------------------------------------------------------
# Advertising enquiries
# ---------------------------------------------------------------------------


@router.get("/contacts", response_model=list[ContactSubmission])
def contacts(
    status: Optional[ContactStatus] = None,
    _: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
):
    return ContactService(store).list(status)


@router.patch("/contacts/{submission_id}", response_model=ContactSubmission)
def update_contact(
    submission_id: str,
    update: ContactStatusUpdate,
    _: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
):
    return ContactService(store).set_status(submission_id, update.status)


# ---------------------------------------------------------------------------
# Stored image re-optimization
# ---------------------------------------------------------------------------


@router.post("/images/optimize", response_model=BatchOptimizeResult)
def optimize_images(
    kind: ListingKind = Query(ListingKind.PRODUCT),
    batch_size: int = Query(DEFAULT_BATCH_SIZE, ge=1, le=50),
    _: Viewer = Depends(require_admin),
    store: DataStore = Depends(get_datastore),
):
    result = optimize_stored_images(store, kind, batch_size)
    logger.info("Image batch on %s: %s", kind.table, result.message)
    return result
