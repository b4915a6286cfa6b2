"""
Social account routes: connect, list, update and remove partner accounts.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..access import get_tenant_scope, load_owned, require_authenticated, require_owned
from ..database import get_db
from ..errors import ValidationFailed
from ..logging_config import social_logger
from ..models.retail_partner import RetailPartner
from ..models.social_account import SocialAccount
from ..principals import Principal
from ..schemas.social import (
    FacebookConnectRequest,
    SocialAccountCreate,
    SocialAccountUpdate,
    social_account_to_dict,
)
from ..social import SocialPublisher, get_publisher
from ..stores.partners import RetailPartnerStore
from ..stores.social_accounts import SocialAccountStore
from ..tenancy import TenantScope

router = APIRouter(prefix="/api/social-accounts", tags=["social-accounts"])


@router.get("", response_model=List[dict])
def list_accounts(
    platform: Optional[str] = None,
    scope: TenantScope = Depends(get_tenant_scope),
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    accounts = SocialAccountStore(db).list_by_tenant(scope, principal, platform=platform)
    return [social_account_to_dict(a) for a in accounts]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_account(
    data: SocialAccountCreate,
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    """Connect an account to a retail partner the caller may act for."""
    partner = load_owned(RetailPartnerStore(db), principal, data.partner_id)
    account = SocialAccountStore(db).create_for_partner(partner, data.to_fields())
    social_logger.info("Social account connected", account_id=account.id, partner_id=partner.id)
    return social_account_to_dict(account)


@router.post("/facebook/connect", status_code=status.HTTP_201_CREATED)
def connect_facebook_page(
    data: FacebookConnectRequest,
    principal: Principal = Depends(require_authenticated),
    db: Session = Depends(get_db),
    publisher: SocialPublisher = Depends(get_publisher),
):
    """Connect one of the token owner's Facebook pages, storing the page's own token."""
    partner = load_owned(RetailPartnerStore(db), principal, data.partner_id)
    pages = publisher.fetch_pages(data.access_token)
    page = next((p for p in pages if p.id == data.page_id), None)
    if page is None:
        raise ValidationFailed("Page not found for this access token")

    account = SocialAccountStore(db).create_for_partner(partner, {
        "platform": "facebook",
        "account_id": page.id,
        "account_name": page.name,
        "access_token": page.access_token or data.access_token,
    })
    social_logger.info("Facebook page connected", account_id=account.id, partner_id=partner.id)
    return social_account_to_dict(account)


@router.get("/partner/{partner_id}", response_model=List[dict])
def list_partner_accounts(
    partner: RetailPartner = Depends(require_owned(RetailPartnerStore, "partner_id")),
    db: Session = Depends(get_db),
):
    return [social_account_to_dict(a) for a in SocialAccountStore(db).list_for_partner_record(partner.id)]


@router.patch("/{account_id}")
def update_account(
    data: SocialAccountUpdate,
    account: SocialAccount = Depends(require_owned(SocialAccountStore, "account_id")),
    db: Session = Depends(get_db),
):
    return social_account_to_dict(SocialAccountStore(db).update(account, data.to_fields()))


@router.delete("/{account_id}")
def delete_account(
    account: SocialAccount = Depends(require_owned(SocialAccountStore, "account_id")),
    db: Session = Depends(get_db),
):
    account_id = account.id
    SocialAccountStore(db).delete(account)
    social_logger.info("Social account removed", account_id=account_id)
    return {"message": "Social account removed"}
