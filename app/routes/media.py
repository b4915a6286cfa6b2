"""
Media library routes. Files are hosted elsewhere; records hold their URLs.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..access import (
    STAFF_ROLES,
    creation_brand_id,
    get_tenant_scope,
    require_authenticated,
    require_owned,
    require_role,
)
from ..database import get_db
from ..models.media import MediaItem
from ..principals import Principal
from ..schemas.media import MediaItemCreate, MediaItemUpdate, media_to_dict
from ..stores.media import MediaStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api/media", tags=["media"])


@router.get("", response_model=List[dict])
def get_media(
    file_type: Optional[str] = Query(None, alias="fileType"),
    tag: Optional[str] = None,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    """Media of the caller's tenant with optional type and tag filters."""
    return [media_to_dict(m) for m in MediaStore(db).search(scope, file_type=file_type, tag=tag)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_media(
    data: MediaItemCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    return media_to_dict(MediaStore(db).create(brand_id, data.to_fields(exclude={"brand_id"})))


@router.get("/{media_id}")
def get_media_item(item: MediaItem = Depends(require_owned(MediaStore, "media_id"))):
    return media_to_dict(item)


@router.patch("/{media_id}")
def update_media(
    data: MediaItemUpdate,
    item: MediaItem = Depends(require_owned(MediaStore, "media_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return media_to_dict(MediaStore(db).update(item, data.to_fields()))


@router.delete("/{media_id}")
def delete_media(
    item: MediaItem = Depends(require_owned(MediaStore, "media_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    MediaStore(db).delete(item)
    return {"message": "Media deleted successfully"}
