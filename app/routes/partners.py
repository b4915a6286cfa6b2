"""
Retail partner routes.
"""
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
    writable_fields,
)
from ..auth import get_password_hash
from ..database import get_db
from ..logging_config import api_logger
from ..models.retail_partner import RetailPartner
from ..principals import Principal, Role
from ..schemas.auth import user_to_dict
from ..schemas.partners import (
    BulkPartnerImport,
    PartnerWithUserCreate,
    RetailPartnerCreate,
    RetailPartnerUpdate,
    partner_to_dict,
)
from ..stores.partners import RetailPartnerStore
from ..stores.users import UserStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api/retail-partners", tags=["retail-partners"])


@router.get("", response_model=List[dict])
def list_partners(
    status: Optional[str] = None,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    """Retail partners of the caller's tenant. Partner users only see their own rows."""
    partners = RetailPartnerStore(db).list_by_tenant(scope, principal, status=status)
    return [partner_to_dict(p) for p in partners]


@router.get("/tags", response_model=List[str])
def list_tags(
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return RetailPartnerStore(db).tags(scope)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_partner(
    data: RetailPartnerCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    partner = RetailPartnerStore(db).create(brand_id, data.to_fields(exclude={"brand_id"}))
    api_logger.info("Retail partner created", partner_id=partner.id, brand_id=brand_id)
    return partner_to_dict(partner)


@router.post("/bulk")
def bulk_import(
    data: BulkPartnerImport,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Import many partners at once.

    Items are created independently: bad rows are reported under ``errors``
    with their index and do not stop the rest of the batch.
    """
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    result = RetailPartnerStore(db).bulk_import(brand_id, data.partners)
    return {
        "success": True,
        "created": len(result["created"]),
        "partners": [partner_to_dict(p) for p in result["created"]],
        "errors": result["errors"],
    }


@router.post("/with-user", status_code=status.HTTP_201_CREATED)
def create_partner_with_user(
    data: PartnerWithUserCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Create a retail partner together with the partner user that will manage it."""
    brand_id = creation_brand_id(db, principal, scope, data.partner.brand_id)
    user = UserStore(db).create(
        username=data.user.username,
        email=data.user.email,
        hashed_password=get_password_hash(data.user.password),
        name=data.user.name,
        role=Role.PARTNER,
        commit=False,
    )
    fields = data.partner.to_fields(exclude={"brand_id"})
    partner = RetailPartnerStore(db).create(brand_id, {**fields, "user_id": user.id})
    api_logger.info("Retail partner created with user", partner_id=partner.id, user_id=user.id)
    return {"partner": partner_to_dict(partner), "user": user_to_dict(user)}


@router.get("/{partner_id}")
def get_partner(partner: RetailPartner = Depends(require_owned(RetailPartnerStore, "partner_id"))):
    return partner_to_dict(partner)


@router.patch("/{partner_id}")
def update_partner(
    data: RetailPartnerUpdate,
    principal: Principal = Depends(require_authenticated),
    partner: RetailPartner = Depends(require_owned(RetailPartnerStore, "partner_id")),
    db: Session = Depends(get_db),
):
    """Partial update. Partner users may only change their contact details and footer."""
    fields = writable_fields(principal, data.to_fields())
    return partner_to_dict(RetailPartnerStore(db).update(partner, fields))


@router.delete("/{partner_id}")
def delete_partner(
    partner: RetailPartner = Depends(require_owned(RetailPartnerStore, "partner_id", *STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Delete a partner and its post assignments. Refused while social accounts are connected."""
    partner_id = partner.id
    RetailPartnerStore(db).delete(partner)
    api_logger.info("Retail partner deleted", partner_id=partner_id)
    return {"message": "Retail partner deleted"}
