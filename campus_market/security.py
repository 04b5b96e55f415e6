from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def parse_origins(raw: str) -> list[str]:
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def add_cors(app: FastAPI, allowed_origins: str) -> None:
    """
    Attach CORS from the CORS_ALLOWED_ORIGINS setting.
    - "*" -> allow all origins (credentials disabled)
    - "http://localhost:5173,https://market.example" -> allow list (credentials enabled)
    """
    origins = parse_origins(allowed_origins)
    if not origins or origins == ["*"]:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,  # browsers reject credentials with a wildcard origin
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
