"""Service-level errors translated to HTTP responses by the app."""
from __future__ import annotations


class MarketplaceError(Exception):
    """Base class for errors raised by marketplace services."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(MarketplaceError):
    status_code = 400


class UnauthorizedError(MarketplaceError):
    status_code = 401


class ForbiddenError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409
