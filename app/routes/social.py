"""
Social publishing routes. The caller must be allowed to act for the partner
that owns both the assignment and the target account before anything is sent.
"""
from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..access import load_owned, require_authenticated
from ..database import get_db
from ..errors import Forbidden, UpstreamError, ValidationFailed
from ..logging_config import social_logger
from ..models.post_assignment import PostAssignment
from ..principals import Principal
from ..schemas.posts import assignment_to_dict
from ..schemas.social import PublishRequest
from ..social import AccountCredentials, SocialPublisher, get_publisher
from ..stores.assignments import PostAssignmentStore
from ..stores.social_accounts import SocialAccountStore

router = APIRouter(prefix="/api/social", tags=["social"])


def source_content(assignment: PostAssignment):
    """Description and image to publish. Evergreen rotations carry the selected post's content."""
    extra = assignment.extra or {}
    if extra.get("selectedEvergreenPostId") is not None:
        return extra.get("originalDescription"), extra.get("originalImageUrl")
    return assignment.post.description, assignment.post.image_url


def compose_message(assignment: PostAssignment) -> str:
    """Post text with the partner's footer and tags appended."""
    description, _ = source_content(assignment)
    parts = [description]
    footer = assignment.custom_footer or assignment.partner.footer_template
    if footer:
        parts.append(footer)
    if assignment.custom_tags:
        parts.append(assignment.custom_tags)
    return "\n\n".join(p for p in parts if p)


@router.post("/{platform}/post")
def publish_assignment(
    platform: Literal["facebook", "instagram"],
    data: PublishRequest,
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
    publisher: SocialPublisher = Depends(get_publisher),
):
    """Publish an assigned post to one of the assigned partner's accounts."""
    assignments = PostAssignmentStore(db)
    assignment = load_owned(assignments, principal, data.assignment_id)
    account = load_owned(SocialAccountStore(db), principal, data.social_account_id)

    if account.partner_id != assignment.partner_id:
        raise Forbidden("Social account does not belong to the assigned partner")
    if account.platform != platform:
        raise ValidationFailed(f"Social account is not a {platform} account")
    if account.status != "active":
        raise ValidationFailed("Social account is not active")

    message = data.message or compose_message(assignment)
    _, media_url = source_content(assignment)
    try:
        result = publisher.publish(
            platform,
            AccountCredentials(account_id=account.account_id, access_token=account.access_token),
            message,
            media_url,
        )
    except UpstreamError as e:
        assignments.mark_failed(assignment, e.message)
        raise

    assignment = assignments.mark_published(assignment, result.external_id, result.url)
    social_logger.info(
        "Assignment published",
        assignment_id=assignment.id,
        platform=platform,
        external_id=result.external_id,
    )
    return {
        "success": True,
        "externalId": result.external_id,
        "url": result.url,
        "assignment": assignment_to_dict(assignment),
    }


@router.get("/facebook/pages", response_model=List[dict])
def list_facebook_pages(
    access_token: str = Query(..., alias="accessToken"),
    principal: Principal = Depends(require_authenticated),
    publisher: SocialPublisher = Depends(get_publisher),
):
    """Pages the token's user manages. Page tokens are not returned."""
    return [
        {
            "id": page.id,
            "name": page.name,
            "category": page.category,
            "instagramAccountId": page.instagram_account_id,
        }
        for page in publisher.fetch_pages(access_token)
    ]
