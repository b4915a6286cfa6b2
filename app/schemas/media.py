from typing import List, Literal, Optional

from pydantic import Field

from ..clock import isoformat
from .common import ApiModel

FileType = Literal["image", "video", "document"]


class MediaItemCreate(ApiModel):
    name: str = Field(min_length=1)
    file_url: str = Field(min_length=1)
    file_type: FileType = "image"
    description: Optional[str] = None
    tags: List[str] = []
    # Honoured for admins only
    brand_id: Optional[int] = None


class MediaItemUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None


def media_to_dict(item) -> dict:
    return {
        "id": item.id,
        "brandId": item.brand_id,
        "name": item.name,
        "fileUrl": item.file_url,
        "fileType": item.file_type,
        "description": item.description,
        "tags": item.tags or [],
        "createdAt": isoformat(item.created_at),
    }
