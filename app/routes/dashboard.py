"""
Dashboard routes for tenant statistics.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..access import get_tenant_scope, require_authenticated
from ..clock import utcnow
from ..database import get_db
from ..models.content_post import ContentPost
from ..principals import PartnerPrincipal, Principal
from ..schemas.dashboard import DashboardStats, UpcomingPost
from ..stores.media import MediaStore
from ..stores.partners import RetailPartnerStore
from ..stores.posts import ContentPostStore
from ..stores.social_accounts import SocialAccountStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api", tags=["dashboard"])


def visible_assignments(post: ContentPost, principal: Principal):
    """A partner user only counts its own assignments."""
    if isinstance(principal, PartnerPrincipal):
        return [a for a in post.assignments if a.partner_id in principal.partner_ids]
    return post.assignments


@router.get("/dashboard-stats", response_model=DashboardStats)
def get_dashboard_stats(
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    """Counts for the caller's tenant. Partner users get counts for their own rows."""
    partners = RetailPartnerStore(db)
    posts = ContentPostStore(db)

    upcoming = []
    if not scope.is_empty:
        rows = (
            posts.scoped_query(scope, principal)
            .filter(ContentPost.status == "scheduled", ContentPost.scheduled_date >= utcnow())
            .order_by(ContentPost.scheduled_date.asc())
            .limit(5)
            .all()
        )
        upcoming = [
            UpcomingPost(
                id=p.id,
                title=p.title,
                scheduled_date=p.scheduled_date.isoformat(),
                partners=len(visible_assignments(p, principal)),
            )
            for p in rows
        ]

    return DashboardStats(
        total_partners=partners.count_by_tenant(scope, principal),
        active_partners=partners.count_by_tenant(scope, principal, status="active"),
        pending_partners=partners.count_by_tenant(scope, principal, status="pending"),
        total_posts=posts.count_by_tenant(scope, principal),
        scheduled_posts=posts.count_by_tenant(scope, principal, status="scheduled"),
        published_posts=posts.count_by_tenant(scope, principal, status="published"),
        connected_accounts=SocialAccountStore(db).count_by_tenant(scope, principal, status="active"),
        media_items=MediaStore(db).count_by_tenant(scope, principal),
        upcoming_posts=upcoming,
    )
