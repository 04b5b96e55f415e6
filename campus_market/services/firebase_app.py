"""Firebase Admin SDK initialisation shared by the data store and auth."""
from __future__ import annotations

import json
import logging

import firebase_admin
from firebase_admin import credentials

from campus_market.config import get_settings

logger = logging.getLogger(__name__)


def ensure_firebase_app() -> firebase_admin.App:
    """Initialise the default Firebase app exactly once and return it."""

    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    settings = get_settings()
    try:
        if settings.firebase_credentials_json:
            # Accept path or JSON string
            cred_obj: credentials.Base = (
                credentials.Certificate(settings.firebase_credentials_json)
                if settings.firebase_credentials_json.endswith(".json")
                else credentials.Certificate(json.loads(settings.firebase_credentials_json))
            )
        else:
            # Attempt default credentials (useful on Cloud Run with workload identity)
            cred_obj = credentials.ApplicationDefault()

        options = {"databaseURL": settings.database_url} if settings.database_url else None
        app = firebase_admin.initialize_app(cred_obj, options)
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to initialise Firebase Admin SDK: %s", exc)
        raise
    logger.info("Firebase Admin SDK initialised.")
    return app
