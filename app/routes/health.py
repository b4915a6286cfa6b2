"""
Ignyt Health Check Routes
Liveness, readiness and system resource checks
"""
import sys
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..auth import get_session_store
from ..clock import utcnow
from ..config import get_settings
from ..database import get_db
from ..sessions import SessionStore

settings = get_settings()

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = utcnow()
VERSION = "1.0.0"


def get_uptime() -> str:
    """Get service uptime as human-readable string"""
    delta = utcnow() - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity"""
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "backend": db.get_bind().dialect.name,
            "persistent": bool(settings.database_url),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


def check_system() -> Dict[str, Any]:
    """Check system resources"""
    try:
        memory = psutil.virtual_memory()
        return {
            "status": "healthy" if memory.percent < 90 else "warning",
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": memory.percent,
            "python_version": sys.version.split()[0],
        }
    except Exception as e:
        return {
            "status": "unknown",
            "error": str(e),
        }


def check_sessions(store: SessionStore) -> Dict[str, Any]:
    """The session backend answers lookups"""
    try:
        store.get("health-check")
        return {"status": "healthy", "backend": type(store).__name__}
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


def integrations() -> Dict[str, Any]:
    """Which optional outbound integrations are configured"""
    return {
        "facebook_app": bool(settings.facebook_app_id),
        "graph_api_version": settings.graph_api_version,
        "mail": "sendgrid" if settings.sendgrid_api_key else "log-only",
    }


@router.get("")
def health_check(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Health check endpoint for load balancers and monitoring."""
    database = check_database(db)
    sessions = check_sessions(store)
    healthy = database["status"] == "healthy" and sessions["status"] == "healthy"
    return {
        "status": "healthy" if healthy else "degraded",
        "environment": settings.environment,
        "version": VERSION,
        "uptime": get_uptime(),
        "database": database,
        "sessions": sessions,
        "integrations": integrations(),
    }


@router.get("/live")
def health_live():
    """Liveness probe - is the service running?"""
    return {"ok": True, "status": "alive", "uptime": get_uptime()}


@router.get("/system")
def health_system():
    return check_system()
