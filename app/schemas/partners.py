from typing import List, Literal, Optional

from pydantic import Field

from ..clock import isoformat
from .auth import UserCreate
from .common import ApiModel, EMAIL_PATTERN

PartnerStatus = Literal["pending", "active", "needs_attention", "inactive"]


class RetailPartnerCreate(ApiModel):
    name: str = Field(min_length=1)
    contact_email: str = Field(pattern=EMAIL_PATTERN)
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    footer_template: Optional[str] = None
    status: PartnerStatus = "pending"
    metadata: Optional[dict] = None
    # Honoured for admins only
    brand_id: Optional[int] = None


class RetailPartnerUpdate(ApiModel):
    """Partial update. brand_id is deliberately absent: it never changes."""
    name: Optional[str] = Field(default=None, min_length=1)
    contact_email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    footer_template: Optional[str] = None
    status: Optional[PartnerStatus] = None
    metadata: Optional[dict] = None


class BulkPartnerImport(ApiModel):
    partners: List[dict] = Field(min_length=1)
    # Honoured for admins only
    brand_id: Optional[int] = None


class PartnerUserCreate(ApiModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)


class PartnerWithUserCreate(ApiModel):
    partner: RetailPartnerCreate
    user: PartnerUserCreate


def partner_to_dict(partner) -> dict:
    return {
        "id": partner.id,
        "brandId": partner.brand_id,
        "userId": partner.user_id,
        "name": partner.name,
        "status": partner.status,
        "contactEmail": partner.contact_email,
        "contactPhone": partner.contact_phone,
        "address": partner.address,
        "footerTemplate": partner.footer_template,
        "metadata": partner.extra or {},
        "createdAt": isoformat(partner.created_at),
        "connectionDate": isoformat(partner.connection_date),
    }


__all__ = [
    "RetailPartnerCreate",
    "RetailPartnerUpdate",
    "BulkPartnerImport",
    "PartnerWithUserCreate",
    "PartnerUserCreate",
    "UserCreate",
    "partner_to_dict",
]
