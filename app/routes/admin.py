"""
Admin routes: brand management, platform statistics and impersonation.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..access import require_authenticated, require_role
from ..auth import build_principal, get_current_session, get_session_store
from ..database import get_db
from ..errors import Forbidden, NoActiveImpersonation, not_found
from ..logging_config import auth_logger
from ..models.brand import Brand
from ..models.content_post import ContentPost
from ..models.retail_partner import RetailPartner
from ..models.user import User
from ..principals import (
    AdminPrincipal,
    ImpersonatedBrandPrincipal,
    Principal,
    Role,
    describe,
)
from ..schemas.brands import AdminBrandUpdate, BrandCreate, brand_to_dict
from ..schemas.dashboard import AdminStats
from ..sessions import SessionRecord, SessionStore
from ..stores.users import BrandStore
from ..tenancy import TenantScope
from .brands import create_brand_account

router = APIRouter(prefix="/api/admin", tags=["admin"])

require_admin = require_role(Role.ADMIN)


def brand_summary(db: Session, brand: Brand) -> dict:
    partner_count = db.query(RetailPartner).filter(RetailPartner.brand_id == brand.id).count()
    post_count = db.query(ContentPost).filter(ContentPost.brand_id == brand.id).count()
    owner = brand.owner
    return {
        **brand_to_dict(brand),
        "ownerEmail": owner.email if owner else None,
        "ownerUsername": owner.username if owner else None,
        "partnerCount": partner_count,
        "postCount": post_count,
    }


@router.get("/brands", response_model=List[dict])
def list_brands(principal: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    """Every brand on the platform."""
    return [brand_summary(db, b) for b in BrandStore(db).list_by_tenant(TenantScope.all())]


@router.post("/brands", status_code=status.HTTP_201_CREATED)
def create_brand(
    data: BrandCreate,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    brand = create_brand_account(db, data)
    return brand_summary(db, brand)


@router.get("/brands/{brand_id}")
def get_brand(brand_id: int, principal: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    brand = BrandStore(db).get(brand_id)
    if brand is None:
        raise not_found("Brand")
    return brand_summary(db, brand)


@router.patch("/brands/{brand_id}")
def update_brand(
    brand_id: int,
    data: AdminBrandUpdate,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Update a brand. Deactivating a brand also deactivates its owner's login."""
    brands = BrandStore(db)
    brand = brands.get(brand_id)
    if brand is None:
        raise not_found("Brand")
    fields = data.to_fields()
    if brand.owner is not None:
        if "active" in fields:
            brand.owner.is_active = fields["active"]
        if "plan" in fields:
            brand.owner.plan_type = fields["plan"]
    brand = brands.update(brand, fields)
    auth_logger.info("Brand updated by admin", user_id=principal.id, brand_id=brand_id, fields=sorted(fields))
    return brand_summary(db, brand)


@router.get("/stats", response_model=AdminStats)
def get_stats(principal: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    users_by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    return AdminStats(
        total_brands=db.query(Brand).count(),
        active_brands=db.query(Brand).filter(Brand.active.is_(True)).count(),
        total_partners=db.query(RetailPartner).count(),
        total_posts=db.query(ContentPost).count(),
        published_posts=db.query(ContentPost).filter(ContentPost.status == "published").count(),
        users_by_role={role.value: users_by_role.get(role.value, 0) for role in Role},
    )


@router.post("/impersonate/{brand_id}")
def impersonate(
    brand_id: int,
    principal: Principal = Depends(require_admin),
    session: SessionRecord = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db),
):
    """Act as a brand until impersonation ends. Admin routes are unavailable meanwhile."""
    if not isinstance(principal, AdminPrincipal):
        raise Forbidden("Only administrators can impersonate brands")
    if BrandStore(db).get(brand_id) is None:
        raise not_found("Brand")

    record = store.set_impersonation(session.sid, brand_id)
    auth_logger.info("Impersonation started", user_id=principal.user_id, brand_id=brand_id)
    return {"success": True, "principal": describe(build_principal(db, record))}


@router.post("/end-impersonation")
def end_impersonation(
    principal: Principal = Depends(require_authenticated),
    session: SessionRecord = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db),
):
    """Return to the admin principal that started the impersonation."""
    if isinstance(principal, ImpersonatedBrandPrincipal):
        record = store.set_impersonation(session.sid, None)
        auth_logger.info("Impersonation ended", user_id=principal.admin_id, brand_id=principal.brand_id)
        return {"success": True, "principal": describe(build_principal(db, record))}
    if isinstance(principal, AdminPrincipal):
        raise NoActiveImpersonation()
    raise Forbidden("Insufficient permissions")
