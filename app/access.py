"""
Access guard: authentication, then role, then tenant ownership.

Routes declare what they need through these dependencies. Because the
ownership check depends on the role check, which depends on authentication,
an anonymous caller is rejected before any lookup can reveal whether a
record exists.
"""
from typing import Any, Dict, Optional, Type

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from .auth import get_current_principal
from .database import get_db
from .errors import Forbidden, Unauthorized, not_found
from .logging_config import auth_logger
from .principals import Principal, PartnerPrincipal, Role
from .stores.base import TenantScopedStore
from .stores.users import BrandStore
from .tenancy import TenantScope, require_single_tenant, resolve_tenant

# Fields a partner user may change on its own retail partner record
PARTNER_MUTABLE_FIELDS = frozenset({"contact_email", "contact_phone", "address", "footer_template"})

STAFF_ROLES = (Role.ADMIN, Role.BRAND)


def require_authenticated(principal: Optional[Principal] = Depends(get_current_principal)) -> Principal:
    if principal is None:
        raise Unauthorized("Authentication required")
    return principal


def require_role(*roles: Role):
    """Dependency factory admitting only the given roles."""
    allowed = frozenset(Role(r) for r in roles)

    def dependency(principal: Principal = Depends(require_authenticated)) -> Principal:
        if principal.role not in allowed:
            auth_logger.warning(
                "Forbidden: role not allowed",
                user_id=principal.id,
                role=principal.role.value,
            )
            raise Forbidden("Insufficient permissions")
        return principal

    return dependency


def get_tenant_scope(
    brand_id: Optional[int] = Query(None, alias="brandId"),
    principal: Principal = Depends(require_authenticated),
) -> TenantScope:
    """Tenant scope of the request. ``brandId`` only counts for admins."""
    return resolve_tenant(principal, brand_id)


def creation_brand_id(db: Session, principal: Principal, scope: TenantScope,
                      body_brand_id: Optional[int] = None) -> int:
    """The brand a new record is stamped with. A body ``brandId`` only counts for admins."""
    if body_brand_id is not None:
        scope = resolve_tenant(principal, body_brand_id)
    brand_id = require_single_tenant(scope)
    if principal.is_admin and BrandStore(db).get(brand_id) is None:
        raise not_found("Brand")
    return brand_id


def check_owned(store: TenantScopedStore, principal: Principal, record) -> None:
    if principal.is_admin:
        return
    brand_id = store.brand_id_of(record)
    allowed = resolve_tenant(principal).includes(brand_id)
    if allowed and isinstance(principal, PartnerPrincipal):
        allowed = store.partner_can_access(principal, record)
    if not allowed:
        auth_logger.warning(
            "Forbidden: tenant mismatch",
            user_id=principal.id,
            resource=store.resource_name,
            record_id=record.id,
        )
        raise Forbidden(f"You do not have access to this {store.resource_name.lower()}")


def load_owned(store: TenantScopedStore, principal: Principal, record_id) -> Any:
    """Load a record and confirm it lies inside the principal's tenant."""
    record = store.get(record_id) if record_id is not None else None
    if record is None:
        raise not_found(store.resource_name)
    check_owned(store, principal, record)
    return record


def require_owned(store_cls: Type[TenantScopedStore], id_param: str, *roles: Role):
    """
    Dependency factory loading the record named by path parameter ``id_param``.

    With ``roles`` the role check runs first; without, any signed-in user passes
    on to the ownership check.
    """
    guard = require_role(*roles) if roles else require_authenticated

    def dependency(
        request: Request,
        principal: Principal = Depends(guard),
        db: Session = Depends(get_db),
    ):
        try:
            record_id = int(request.path_params.get(id_param))
        except (TypeError, ValueError):
            raise not_found(store_cls.resource_name)
        return load_owned(store_cls(db), principal, record_id)

    return dependency


def writable_fields(principal: Principal, data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop, without complaint, whatever a partner user is not allowed to change."""
    if not isinstance(principal, PartnerPrincipal):
        return data
    kept = {k: v for k, v in data.items() if k in PARTNER_MUTABLE_FIELDS}
    dropped = sorted(set(data) - set(kept))
    if dropped:
        auth_logger.debug("Dropped partner-restricted fields", user_id=principal.id, fields=dropped)
    return kept
