"""Account endpoints: sign-up and the signed-in user's own profile."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from campus_market.models import Profile, ProfileUpdate, SignupRequest, Viewer
from campus_market.services.accounts import AccountService
from campus_market.services.auth import FirebaseAuthService, get_auth_service
from campus_market.services.datastore import DataStore, get_datastore

from .deps import get_viewer, require_signed_in

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/signup", status_code=201)
def signup(
    request: SignupRequest,
    store: DataStore = Depends(get_datastore),
    auth_service: FirebaseAuthService = Depends(get_auth_service),
):
    profile, role = AccountService(store, auth_service).signup(request)
    return {
        "profile": profile,
        "role": role,
        "message": "Account created. An admin must approve it before you can post.",
    }


@router.get("/me")
def me(viewer: Viewer = Depends(get_viewer), store: DataStore = Depends(get_datastore)):
    profile = AccountService(store).get_profile(viewer.uid) if viewer.uid else None
    return {"viewer": viewer, "profile": profile}


@router.patch("/me", response_model=Profile)
def update_me(
    update: ProfileUpdate,
    viewer: Viewer = Depends(require_signed_in),
    store: DataStore = Depends(get_datastore),
):
    return AccountService(store).update_profile(viewer.uid, update)
