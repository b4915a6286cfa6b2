from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from ..clock import isoformat
from .common import ApiModel

PostStatus = Literal["draft", "scheduled", "published", "automated"]
Platform = Literal["facebook", "instagram", "google"]


class ContentPostCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str
    image_url: Optional[str] = None
    platforms: List[Platform] = Field(min_length=1)
    status: Optional[PostStatus] = None
    is_evergreen: bool = False
    scheduled_date: Optional[datetime] = None
    metadata: Optional[dict] = None
    # Honoured for admins only
    brand_id: Optional[int] = None


class ContentPostUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    platforms: Optional[List[Platform]] = None
    status: Optional[PostStatus] = None
    is_evergreen: Optional[bool] = None
    scheduled_date: Optional[datetime] = None
    metadata: Optional[dict] = None


class SchedulePostRequest(ApiModel):
    scheduled_date: datetime
    partner_ids: List[int] = Field(min_length=1)
    custom_footer: Optional[str] = None
    custom_tags: Optional[str] = None


class ReschedulePostRequest(ApiModel):
    new_date: datetime


class EvergreenScheduleRequest(ApiModel):
    scheduled_date: datetime
    platforms: List[Platform] = Field(min_length=1)
    partner_ids: List[int] = Field(min_length=1)
    # Honoured for admins only
    brand_id: Optional[int] = None


def assignment_to_dict(assignment) -> dict:
    return {
        "id": assignment.id,
        "postId": assignment.post_id,
        "partnerId": assignment.partner_id,
        "status": assignment.status,
        "customFooter": assignment.custom_footer,
        "customTags": assignment.custom_tags,
        "publishedUrl": assignment.published_url,
        "publishedDate": isoformat(assignment.published_date),
        "externalId": assignment.external_id,
        "metadata": assignment.extra or {},
        "createdAt": isoformat(assignment.created_at),
    }


def post_to_dict(post) -> dict:
    return {
        "id": post.id,
        "brandId": post.brand_id,
        "creatorId": post.creator_id,
        "title": post.title,
        "description": post.description,
        "imageUrl": post.image_url,
        "platforms": post.platforms or [],
        "status": post.status,
        "isEvergreen": bool(post.is_evergreen),
        "scheduledDate": isoformat(post.scheduled_date),
        "publishedDate": isoformat(post.published_date),
        "metadata": post.extra or {},
        "createdAt": isoformat(post.created_at),
        "updatedAt": isoformat(post.updated_at),
    }
