from .auth import router as auth_router
from .admin import router as admin_router
from .brands import router as brands_router
from .partners import router as partners_router
from .content import router as content_router, partner_router
from .social_accounts import router as social_accounts_router
from .social import router as social_router
from .media import router as media_router
from .invites import router as invites_router
from .dashboard import router as dashboard_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "admin_router",
    "brands_router",
    "partners_router",
    "content_router",
    "partner_router",
    "social_accounts_router",
    "social_router",
    "media_router",
    "invites_router",
    "dashboard_router",
    "health_router",
]
