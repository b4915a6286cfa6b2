"""
Custom middleware for request ids, security headers and request logging.
"""
import secrets
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_config import get_logger, request_id_var

request_logger = get_logger("requests")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag the request with an id that every log line and the response carry."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = f"req_{secrets.token_hex(6)}"
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        # JSON API only: nothing is framed and no scripts run
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        # Responses carry tenant data
        response.headers.setdefault("Cache-Control", "no-store")

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        level = "info" if response.status_code < 400 else "warning" if response.status_code < 500 else "error"
        getattr(request_logger, level)(
            f"{request.method} {request.url.path} -> {response.status_code}",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response
