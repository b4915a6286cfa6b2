from typing import Literal, Optional

from pydantic import Field

from .common import ApiModel, EMAIL_PATTERN

PlanType = Literal["standard", "premium"]


class BrandCreate(ApiModel):
    """Admin-created brand: a brand user plus its brand record."""
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    plan_type: PlanType = "standard"
    logo: Optional[str] = None


class BrandUpdate(ApiModel):
    """Fields a brand owner may change on its own brand."""
    name: Optional[str] = Field(default=None, min_length=1)
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    metadata: Optional[dict] = None


class AdminBrandUpdate(BrandUpdate):
    active: Optional[bool] = None
    plan: Optional[PlanType] = None


def brand_to_dict(brand) -> dict:
    return {
        "id": brand.id,
        "ownerId": brand.owner_id,
        "name": brand.name,
        "plan": brand.plan,
        "active": brand.active,
        "logo": brand.logo,
        "primaryColor": brand.primary_color,
        "metadata": brand.extra or {},
        "createdAt": brand.created_at.isoformat() if brand.created_at else None,
    }
