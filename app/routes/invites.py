"""
Partner invitation routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..access import STAFF_ROLES, check_owned, creation_brand_id, get_tenant_scope, require_role
from ..config import get_settings
from ..database import get_db
from ..errors import not_found
from ..logging_config import api_logger
from ..principals import Principal
from ..schemas.invites import InviteCreate, invite_to_dict
from ..services.email import Mailer, get_mailer
from ..stores.invites import InviteStore
from ..stores.users import BrandStore
from ..tenancy import TenantScope

settings = get_settings()

router = APIRouter(prefix="/api/invites", tags=["invites"])


def invite_link(token: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/accept-invite?token={token}"


@router.post("", status_code=status.HTTP_201_CREATED)
def create_invite(
    data: InviteCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Invite a prospective partner user by email."""
    brand_id = creation_brand_id(db, principal, scope, data.brand_id)
    brand = BrandStore(db).get(brand_id)
    invite = InviteStore(db).issue(
        brand_id,
        email=data.email,
        name=data.name,
        expiry_days=settings.invite_expiry_days,
        message=data.message,
        role=data.role,
    )
    link = invite_link(invite.token)
    sent = mailer.send_partner_invitation(
        invite.email,
        invite.name,
        brand.name if brand else "A brand",
        link,
        settings.invite_expiry_days,
        custom_message=data.message,
    )
    api_logger.info("Invite issued", brand_id=brand_id, email_sent=sent)
    return {"success": True, "invite": invite_to_dict(invite), "inviteLink": link, "emailSent": sent}


@router.get("", response_model=List[dict])
def list_invites(
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Invites that are neither accepted nor expired."""
    return [invite_to_dict(i) for i in InviteStore(db).pending(scope)]


@router.get("/verify")
def verify_invite(token: str = Query(...), db: Session = Depends(get_db)):
    """Public: check an invite token before showing the sign-up form."""
    invite = InviteStore(db).verify(token)
    brand = BrandStore(db).get(invite.brand_id)
    data = invite_to_dict(invite)
    data.pop("token")
    return {"valid": True, "invite": {**data, "brandName": brand.name if brand else None}}


@router.delete("/{token}")
def revoke_invite(
    token: str,
    principal: Principal = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    invites = InviteStore(db)
    invite = invites.get_by_token(token)
    if invite is None:
        raise not_found("Invite")
    check_owned(invites, principal, invite)
    invites.delete(invite)
    return {"message": "Invite revoked"}
