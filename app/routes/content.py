"""
Content post routes: CRUD, scheduling, evergreen rotation, calendar, and the
partner's view of posts assigned to it.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..access import (
    STAFF_ROLES,
    creation_brand_id,
    get_tenant_scope,
    require_authenticated,
    require_owned,
    require_role,
)
from ..clock import to_naive_utc
from ..database import get_db
from ..logging_config import api_logger
from ..models.content_post import ContentPost
from ..principals import Principal, PartnerPrincipal, Role, acting_user_id
from ..schemas.posts import (
    ContentPostCreate,
    ContentPostUpdate,
    EvergreenScheduleRequest,
    ReschedulePostRequest,
    SchedulePostRequest,
    assignment_to_dict,
    post_to_dict,
)
from ..services.evergreen import schedule_rotation
from ..stores.assignments import PostAssignmentStore
from ..stores.posts import ContentPostStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api/content-posts", tags=["content-posts"])
partner_router = APIRouter(prefix="/api/partner", tags=["partner"])


def post_with_assignments(post: ContentPost, principal: Principal) -> dict:
    """A post plus its assignments; partner users only see their own."""
    assignments = post.assignments
    if isinstance(principal, PartnerPrincipal):
        assignments = [a for a in assignments if a.partner_id in principal.partner_ids]
    return {
        **post_to_dict(post),
        "assignments": [
            {**assignment_to_dict(a), "partnerName": a.partner.name if a.partner else None}
            for a in assignments
        ],
    }


@router.get("", response_model=List[dict])
def list_posts(
    status: Optional[str] = None,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    posts = ContentPostStore(db).list_by_tenant(scope, principal, status=status)
    return [post_to_dict(p) for p in posts]


@router.get("/evergreen", response_model=List[dict])
def list_evergreen(
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return [post_to_dict(p) for p in ContentPostStore(db).evergreen(scope, principal)]


@router.get("/calendar", response_model=List[dict])
def get_calendar(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Scheduled and published posts in a date range, with their partners."""
    posts = ContentPostStore(db).calendar(
        scope,
        to_naive_utc(start_date),
        to_naive_utc(end_date),
        principal,
    )
    return [post_with_assignments(p, principal) for p in posts]


@router.post("/evergreen-schedule", status_code=status.HTTP_201_CREATED)
def schedule_evergreen(
    data: EvergreenScheduleRequest,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Give each selected partner one of the brand's evergreen posts, rotating through them."""
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    result = schedule_rotation(
        db,
        brand_id=brand_id,
        creator_id=acting_user_id(principal),
        scheduled_date=to_naive_utc(data.scheduled_date),
        platforms=data.platforms,
        partner_ids=data.partner_ids,
    )
    return {
        "parentPost": post_to_dict(result["parent"]),
        "partners": len(result["assignments"]),
        "assignments": [
            {
                "assignment": assignment_to_dict(assignment),
                "selectedPost": {"id": selected.id, "title": selected.title},
                "partner": {"id": partner.id, "name": partner.name},
            }
            for assignment, selected, partner in result["assignments"]
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    data: ContentPostCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    post = ContentPostStore(db).create(
        brand_id,
        data.to_fields(exclude={"brand_id"}),
        creator_id=acting_user_id(principal),
    )
    api_logger.info("Content post created", post_id=post.id, brand_id=brand_id)
    return post_to_dict(post)


@router.get("/{post_id}")
def get_post(
    principal: Principal = Depends(require_authenticated),
    post: ContentPost = Depends(require_owned(ContentPostStore, "post_id")),
):
    return post_with_assignments(post, principal)


@router.patch("/{post_id}")
def update_post(
    data: ContentPostUpdate,
    post: ContentPost = Depends(require_owned(ContentPostStore, "post_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return post_to_dict(ContentPostStore(db).update(post, data.to_fields()))


@router.delete("/{post_id}")
def delete_post(
    post: ContentPost = Depends(require_owned(ContentPostStore, "post_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Delete a post together with its assignments."""
    post_id = post.id
    ContentPostStore(db).delete(post)
    api_logger.info("Content post deleted", post_id=post_id)
    return {"message": "Content post deleted"}


@router.post("/{post_id}/schedule")
def schedule_post(
    data: SchedulePostRequest,
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    post: ContentPost = Depends(require_owned(ContentPostStore, "post_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Schedule a post and assign it to partners of the same brand."""
    ContentPostStore(db).schedule(
        post,
        to_naive_utc(data.scheduled_date),
        data.partner_ids,
        custom_footer=data.custom_footer,
        custom_tags=data.custom_tags,
    )
    api_logger.info("Content post scheduled", post_id=post.id, partners=len(data.partner_ids))
    return post_with_assignments(post, principal)


@router.post("/{post_id}/reschedule")
def reschedule_post(
    data: ReschedulePostRequest,
    post: ContentPost = Depends(require_owned(ContentPostStore, "post_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return post_to_dict(ContentPostStore(db).reschedule(post, to_naive_utc(data.new_date)))


@partner_router.get("/posts", response_model=List[dict])
def list_partner_posts(
    status: Optional[str] = None,
    principal: Principal = Depends(require_role(Role.PARTNER)),
    db: Session = Depends(get_db),
):
    """Posts assigned to the signed-in partner user."""
    assignments = PostAssignmentStore(db).list_for_partner(principal, status=status)
    return [
        {
            **assignment_to_dict(a),
            "partnerName": a.partner.name,
            "post": post_to_dict(a.post),
        }
        for a in assignments
    ]
