"""
Domain error hierarchy.

Services raise these; ``blog_api.errors`` is the only place that turns
them into HTTP responses.  Each class carries its status code so the
boundary does not need a lookup table.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for every error that maps to a client-visible response."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, *, errors: Any | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 401   credentials
# ---------------------------------------------------------------------------

class MissingCredentials(AppError):
    status_code = 401
    default_message = "Access denied. No token provided."


class MalformedCredentials(AppError):
    status_code = 401
    default_message = "Invalid authorization format. Use: Bearer <token>"


class InvalidTokenError(AppError):
    status_code = 401
    default_message = "Invalid token"


class ExpiredTokenError(AppError):
    status_code = 401
    default_message = "Token has expired"


class AuthenticationError(AppError):
    """Login failed: unknown email or wrong password."""

    status_code = 401
    default_message = "Invalid email or password"


# ---------------------------------------------------------------------------
# 4xx   resources
# ---------------------------------------------------------------------------

class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Access forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "A record with this unique field already exists"


__all__ = [
    "AppError",
    "MissingCredentials",
    "MalformedCredentials",
    "InvalidTokenError",
    "ExpiredTokenError",
    "AuthenticationError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
]
