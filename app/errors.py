"""
Ignyt API error taxonomy and exception handlers.

Every error leaves the API as ``{"message": ..., "detail": ..., "code": ...}``
with ``detail`` omitted when there is nothing to add.
"""
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import api_logger


# ============================================================
# EXCEPTIONS
# ============================================================

class ApiException(Exception):
    """Base API exception carrying an HTTP status and a stable error code."""

    status_code = 500
    code = "SERVER_ERROR"
    message = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message, "code": self.code}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class Unauthorized(ApiException):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Unauthorized"


class AuthenticationFailed(ApiException):
    status_code = 401
    code = "AUTHENTICATION_FAILED"
    message = "Invalid username or password"


class Forbidden(ApiException):
    status_code = 403
    code = "FORBIDDEN"
    message = "Forbidden"


class NotFound(ApiException):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class ValidationFailed(ApiException):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid request data"


class ConflictError(ApiException):
    status_code = 409
    code = "CONFLICT"
    message = "Resource conflict"


class Gone(ApiException):
    status_code = 410
    code = "GONE"
    message = "Resource has expired"


class NoActiveImpersonation(ApiException):
    status_code = 400
    code = "NO_ACTIVE_IMPERSONATION"
    message = "No active impersonation"


class UpstreamError(ApiException):
    status_code = 502
    code = "UPSTREAM_ERROR"
    message = "External service request failed"


class ServerError(ApiException):
    pass


def not_found(resource: str = "Resource") -> NotFound:
    return NotFound(f"{resource} not found")


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Known failures: stable message, matching status."""
    level = "warning" if exc.status_code < 500 else "error"
    getattr(api_logger, level)(
        f"API Error: {exc.message}",
        status_code=exc.status_code,
        error_code=exc.code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures become a 400 ValidationError."""
    api_logger.warning(
        "Request validation failed",
        path=request.url.path,
        errors=len(exc.errors()),
    )
    body = ValidationFailed(detail=exc.errors()).to_dict()
    return JSONResponse(status_code=400, content=jsonable_encoder(body))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised HTTP errors (unknown routes, wrong methods, rate limits)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected is logged in full and surfaced as a generic 500."""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return JSONResponse(status_code=500, content=ServerError().to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
