"""
Tenant resolution: which brand(s) a request's data belongs to.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional

from .errors import ValidationFailed
from .principals import (
    Principal,
    AdminPrincipal,
    BrandPrincipal,
    PartnerPrincipal,
    ImpersonatedBrandPrincipal,
)


@dataclass(frozen=True)
class TenantScope:
    """Either every tenant (``brand_ids is None``) or an explicit, possibly empty, set."""
    brand_ids: Optional[FrozenSet[int]]

    @classmethod
    def all(cls) -> "TenantScope":
        return cls(None)

    @classmethod
    def of(cls, *brand_ids: int) -> "TenantScope":
        return cls(frozenset(brand_ids))

    @property
    def is_all(self) -> bool:
        return self.brand_ids is None

    @property
    def is_empty(self) -> bool:
        return self.brand_ids is not None and not self.brand_ids

    def includes(self, brand_id: Optional[int]) -> bool:
        if self.brand_ids is None:
            return True
        return brand_id in self.brand_ids

    def filter(self, column):
        """SQL criterion restricting ``column`` to this scope, or None for all tenants."""
        if self.brand_ids is None:
            return None
        return column.in_(sorted(self.brand_ids))


def resolve_tenant(principal: Principal, requested_brand_id: Optional[int] = None) -> TenantScope:
    """
    Resolve the tenant scope for a principal.

    Only admins may pick a tenant with ``requested_brand_id``; the value is
    ignored for everyone else. An admin without one gets every tenant.
    """
    if isinstance(principal, AdminPrincipal):
        if requested_brand_id is not None:
            return TenantScope.of(requested_brand_id)
        return TenantScope.all()
    if isinstance(principal, (BrandPrincipal, ImpersonatedBrandPrincipal)):
        return TenantScope.of(principal.brand_id)
    if isinstance(principal, PartnerPrincipal):
        # No linked partner rows means an empty scope, never a guess
        return TenantScope(frozenset(principal.brand_ids))
    return TenantScope(frozenset())


def require_single_tenant(scope: TenantScope) -> int:
    """The single brand id new records are stamped with."""
    if scope.is_all:
        raise ValidationFailed("brandId is required when acting across tenants")
    if len(scope.brand_ids) != 1:
        raise ValidationFailed("Unable to determine the brand for this request")
    return next(iter(scope.brand_ids))
