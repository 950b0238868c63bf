"""
Single error boundary: maps every exception that escapes a route to a
status code and the standard response envelope, and logs it.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api.config import settings
from blog_api.exceptions import AppError, ConflictError, NotFoundError, ValidationError
from blog_api.responses import failure

logger = logging.getLogger(__name__)


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg", "")})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "%s %s -> %d %s: %s",
        request.method, request.url.path, exc.status_code, type(exc).__name__, exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=failure(exc.message, exc.errors))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await app_error_handler(
        request, ValidationError(errors=_validation_errors(exc))
    )


# SQLSTATE codes from Postgres; SQLite only reports them in the message text.
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _integrity_violation(exc: IntegrityError) -> str | None:
    """Classify *exc* as ``"unique"``, ``"foreign_key"`` or ``None``."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return {UNIQUE_VIOLATION: "unique", FOREIGN_KEY_VIOLATION: "foreign_key"}.get(code)
    text = str(orig)
    if text.startswith("UNIQUE constraint failed"):
        return "unique"
    if text.startswith("FOREIGN KEY constraint failed"):
        return "foreign_key"
    return None


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    violation = _integrity_violation(exc)
    if violation == "unique":
        return await app_error_handler(request, ConflictError())
    if violation == "foreign_key":
        # The referenced user or post was deleted after it was checked.
        return await app_error_handler(request, NotFoundError("Referenced resource not found"))
    return await unhandled_error_handler(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning("%s %s -> %d", request.method, request.url.path, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    errors = {"type": type(exc).__name__, "detail": str(exc)} if settings.DEBUG else None
    return JSONResponse(status_code=500, content=failure("Internal Server Error", errors))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
