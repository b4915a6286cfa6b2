"""
Post assignment store. Assignments hang off content posts, so their tenant is
their post's brand.
"""
from typing import List, Optional

from ..clock import utcnow
from ..models.content_post import ContentPost
from ..models.post_assignment import PostAssignment
from .base import TenantScopedStore


class PostAssignmentStore(TenantScopedStore):
    model = PostAssignment
    resource_name = "Post assignment"

    @property
    def brand_column(self):
        return ContentPost.brand_id

    def brand_id_of(self, record) -> int:
        return record.post.brand_id

    def base_query(self):
        return self.db.query(PostAssignment).join(ContentPost, PostAssignment.post_id == ContentPost.id)

    def partner_criterion(self, principal):
        return PostAssignment.partner_id.in_(sorted(principal.partner_ids))

    def partner_can_access(self, principal, record) -> bool:
        return record.partner_id in principal.partner_ids

    def list_for_partner(self, principal, status: Optional[str] = None) -> List[PostAssignment]:
        """Assignments addressed to a partner user's own partner rows."""
        if not principal.partner_ids:
            return []
        query = self.base_query().filter(self.partner_criterion(principal))
        if status:
            query = query.filter(PostAssignment.status == status)
        return query.order_by(ContentPost.scheduled_date.asc(), PostAssignment.id.asc()).all()

    def mark_published(self, assignment: PostAssignment, external_id: str, url: Optional[str]) -> PostAssignment:
        """Record a successful publish. The post's published date is stamped the first time only."""
        now = utcnow()
        assignment.status = "published"
        assignment.external_id = external_id
        assignment.published_url = url
        assignment.published_date = now

        post = assignment.post
        post.status = "published"
        if post.published_date is None:
            post.published_date = now

        self.db.commit()
        self.db.refresh(assignment)
        return assignment

    def mark_failed(self, assignment: PostAssignment, error: str) -> PostAssignment:
        assignment.status = "failed"
        assignment.extra = {**(assignment.extra or {}), "lastError": error}
        self.db.commit()
        self.db.refresh(assignment)
        return assignment
