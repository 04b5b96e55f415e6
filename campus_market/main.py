from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from campus_market.config import get_settings
from campus_market.handlers import (
    admin_handler,
    auth_handler,
    categories_handler,
    chat_handler,
    contact_handler,
    dashboard_handler,
    images_handler,
    listings_handler,
)
from campus_market.security import add_cors
from campus_market.services.exceptions import MarketplaceError
from campus_market.services.image_optimizer import ImageOptimizationError

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
add_cors(app, settings.cors_allowed_origins)

app.include_router(auth_handler.router)
app.include_router(categories_handler.router)
app.include_router(listings_handler.router)
app.include_router(dashboard_handler.router)
app.include_router(images_handler.router)
app.include_router(chat_handler.router)
app.include_router(contact_handler.router)
app.include_router(admin_handler.router)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(ImageOptimizationError)
async def image_error_handler(request: Request, exc: ImageOptimizationError):
    logger.warning("Image rejected on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    errors = exc.errors(include_url=False, include_context=False)
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
