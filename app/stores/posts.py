"""
Content post store: CRUD, scheduling and the calendar view.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, or_, select

from ..clock import utcnow
from ..errors import ValidationFailed
from ..models.content_post import ContentPost
from ..models.post_assignment import PostAssignment
from ..tenancy import TenantScope
from .base import TenantScopedStore
from .partners import RetailPartnerStore


class ContentPostStore(TenantScopedStore):
    model = ContentPost
    resource_name = "Content post"

    def partner_criterion(self, principal):
        # Partners see the posts assigned to them
        assigned = select(PostAssignment.post_id).where(
            PostAssignment.partner_id.in_(sorted(principal.partner_ids))
        )
        return ContentPost.id.in_(assigned)

    def partner_can_access(self, principal, record) -> bool:
        return any(a.partner_id in principal.partner_ids for a in record.assignments)

    def create(self, brand_id: int, data: Dict[str, Any], creator_id: Optional[int] = None) -> ContentPost:
        data = {k: v for k, v in data.items() if k not in ("id", "published_date")}
        if not data.get("status"):
            data["status"] = "scheduled" if data.get("scheduled_date") else "draft"
        data.setdefault("extra", {})
        data["creator_id"] = creator_id
        if data["status"] == "published":
            data["published_date"] = utcnow()
        return super().create(brand_id, data)

    def update(self, record: ContentPost, data: Dict[str, Any]) -> ContentPost:
        data = {k: v for k, v in (data or {}).items() if k not in ("creator_id", "published_date")}
        if data.get("status") == "published" and record.published_date is None:
            data["published_date"] = utcnow()
        return super().update(record, data)

    def delete(self, record: ContentPost) -> None:
        """Deleting a post removes its assignments with it."""
        super().delete(record)

    # ------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------

    def schedule(
        self,
        post: ContentPost,
        scheduled_date: datetime,
        partner_ids: List[int],
        custom_footer: Optional[str] = None,
        custom_tags: Optional[str] = None,
    ) -> List[PostAssignment]:
        """Schedule ``post`` and assign it to each partner. Every partner must belong to the post's brand."""
        wanted = list(dict.fromkeys(partner_ids))
        partners = RetailPartnerStore(self.db).get_many(post.brand_id, wanted)
        found = {p.id for p in partners}
        missing = [pid for pid in wanted if pid not in found]
        if missing:
            raise ValidationFailed(
                "Retail partners must belong to the post's brand",
                detail={"partnerIds": missing},
            )

        existing = {a.partner_id: a for a in post.assignments}
        assignments = []
        for partner in partners:
            assignment = existing.get(partner.id)
            if assignment is None:
                assignment = PostAssignment(post_id=post.id, partner_id=partner.id, status="pending", extra={})
                self.db.add(assignment)
            if custom_footer is not None:
                assignment.custom_footer = custom_footer
            if custom_tags is not None:
                assignment.custom_tags = custom_tags
            assignments.append(assignment)

        post.scheduled_date = scheduled_date
        post.status = "scheduled"
        self.db.commit()
        for assignment in assignments:
            self.db.refresh(assignment)
        self.db.refresh(post)
        return assignments

    def reschedule(self, post: ContentPost, new_date: datetime) -> ContentPost:
        post.scheduled_date = new_date
        if post.status == "draft":
            post.status = "scheduled"
        self.db.commit()
        self.db.refresh(post)
        return post

    # ------------------------------------------------------------
    # Views
    # ------------------------------------------------------------

    def evergreen(self, scope: TenantScope, principal=None) -> List[ContentPost]:
        return self.list_by_tenant(scope, principal, is_evergreen=True)

    def calendar(
        self,
        scope: TenantScope,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        principal=None,
    ) -> List[ContentPost]:
        """Scheduled and published posts, optionally within ``[start, end]``."""
        if scope.is_empty:
            return []
        query = self.scoped_query(scope, principal).filter(
            ContentPost.status.in_(["scheduled", "published"])
        )
        if start is not None:
            query = query.filter(
                or_(ContentPost.scheduled_date >= start, ContentPost.published_date >= start)
            )
        if end is not None:
            query = query.filter(
                or_(
                    and_(ContentPost.scheduled_date.isnot(None), ContentPost.scheduled_date <= end),
                    and_(ContentPost.scheduled_date.is_(None), ContentPost.published_date <= end),
                )
            )
        return query.order_by(ContentPost.scheduled_date.asc(), ContentPost.id.asc()).all()
