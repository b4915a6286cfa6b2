"""
Brand routes.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..access import get_tenant_scope, require_authenticated, require_owned, require_role
from ..auth import get_password_hash
from ..database import get_db
from ..logging_config import api_logger
from ..models.brand import Brand
from ..principals import Principal, Role
from ..schemas.brands import BrandCreate, BrandUpdate, brand_to_dict
from ..stores.users import BrandStore, UserStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api/brands", tags=["brands"])


def create_brand_account(db: Session, data: BrandCreate) -> Brand:
    """Create a brand user together with its brand record."""
    user = UserStore(db).create(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        name=data.name,
        role=Role.BRAND,
        plan_type=data.plan_type,
        commit=False,
    )
    brand = BrandStore(db).create_for_owner(user, name=data.name, plan=data.plan_type, logo=data.logo)
    api_logger.info("Brand created", brand_id=brand.id)
    return brand


@router.get("", response_model=List[dict])
def list_brands(
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    """Brands visible to the caller: its own, its partners' brands, or all for admins."""
    return [brand_to_dict(b) for b in BrandStore(db).list_by_tenant(scope, principal)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_brand(
    data: BrandCreate,
    principal: Principal = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    return brand_to_dict(create_brand_account(db, data))


@router.get("/{brand_id}")
def get_brand(brand: Brand = Depends(require_owned(BrandStore, "brand_id"))):
    return brand_to_dict(brand)


@router.patch("/{brand_id}")
def update_brand(
    data: BrandUpdate,
    brand: Brand = Depends(require_owned(BrandStore, "brand_id", Role.ADMIN, Role.BRAND)),
    db: Session = Depends(get_db),
):
    return brand_to_dict(BrandStore(db).update(brand, data.to_fields()))
