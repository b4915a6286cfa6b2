"""
Principals: the authenticated identity executing a request.

A principal is one of four variants. Impersonation is its own variant so an
admin acting as a brand can never be confused with the brand itself.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Union


class Role(str, Enum):
    """User roles on the platform."""
    ADMIN = "admin"
    BRAND = "brand"
    PARTNER = "partner"


@dataclass(frozen=True)
class AdminPrincipal:
    user_id: int

    role = Role.ADMIN
    is_admin = True

    @property
    def id(self) -> int:
        return self.user_id


@dataclass(frozen=True)
class BrandPrincipal:
    user_id: int

    role = Role.BRAND
    is_admin = False

    @property
    def id(self) -> int:
        return self.user_id

    @property
    def brand_id(self) -> int:
        return self.user_id


@dataclass(frozen=True)
class PartnerPrincipal:
    user_id: int
    brand_ids: FrozenSet[int] = field(default_factory=frozenset)
    partner_ids: FrozenSet[int] = field(default_factory=frozenset)

    role = Role.PARTNER
    is_admin = False

    @property
    def id(self) -> int:
        return self.user_id


@dataclass(frozen=True)
class ImpersonatedBrandPrincipal:
    """An admin acting as a brand. Behaves as a brand until impersonation ends."""
    admin_id: int
    brand_id: int

    role = Role.BRAND
    is_admin = False

    @property
    def id(self) -> int:
        return self.brand_id


Principal = Union[AdminPrincipal, BrandPrincipal, PartnerPrincipal, ImpersonatedBrandPrincipal]


def describe(principal: Principal) -> dict:
    """Log/response friendly summary of a principal."""
    data = {"id": principal.id, "role": principal.role.value}
    if isinstance(principal, ImpersonatedBrandPrincipal):
        data["impersonatedBy"] = principal.admin_id
        data["brandId"] = principal.brand_id
    elif isinstance(principal, BrandPrincipal):
        data["brandId"] = principal.brand_id
    elif isinstance(principal, PartnerPrincipal):
        data["brandIds"] = sorted(principal.brand_ids)
        data["partnerIds"] = sorted(principal.partner_ids)
    return data


def acting_user_id(principal: Principal) -> int:
    """The user row behind a principal; for impersonation that is the admin."""
    if isinstance(principal, ImpersonatedBrandPrincipal):
        return principal.admin_id
    return principal.user_id
