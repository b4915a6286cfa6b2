"""
Ignyt API - FastAPI application entry point.
"""
import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import models  # noqa: F401  registers the tables on Base.metadata
from .config import get_settings
from .database import engine, Base, SessionLocal
from .errors import register_exception_handlers
from .limiter import limiter
from .logging_config import api_logger, auth_logger
from .middleware import RequestContextMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from .routes import (
    auth_router,
    admin_router,
    brands_router,
    partners_router,
    content_router,
    partner_router,
    social_accounts_router,
    social_router,
    media_router,
    invites_router,
    dashboard_router,
    health_router,
)
from .sessions import SessionStore, build_session_store

settings = get_settings()


async def sweep_expired_sessions(store: SessionStore, interval: int):
    """Periodically drop expired sessions, independent of request handling."""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await asyncio.to_thread(store.prune_expired)
            if removed:
                auth_logger.info("Pruned expired sessions", removed=removed)
        except Exception as e:
            auth_logger.error("Session sweep failed", error=e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    # Startup (in production, use Alembic migrations instead)
    Base.metadata.create_all(bind=engine)

    store = build_session_store(settings, SessionLocal)
    app.state.session_store = store
    sweeper = asyncio.create_task(
        sweep_expired_sessions(store, settings.session_sweep_interval_seconds)
    )
    api_logger.info("Ignyt API started", environment=settings.environment)

    yield  # App is running

    # Shutdown
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    store.close()
    engine.dispose()
    api_logger.info("Ignyt API stopped")


app = FastAPI(
    title="Ignyt API",
    description="Brand to retail partner content distribution API",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

# Added after the logging middleware so it wraps it and the id is already set
app.add_middleware(RequestContextMiddleware)

# CORS with credentials so the session cookie is sent cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(brands_router)
app.include_router(partners_router)
app.include_router(content_router)
app.include_router(partner_router)
app.include_router(social_accounts_router)
app.include_router(social_router)
app.include_router(media_router)
app.include_router(invites_router)
app.include_router(dashboard_router)
app.include_router(health_router)


@app.get("/")
def root():
    """Root endpoint points at the API docs."""
    return {
        "message": "Ignyt API",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
