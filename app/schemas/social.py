from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from ..clock import isoformat
from .common import ApiModel

SocialPlatform = Literal["facebook", "instagram"]
AccountStatus = Literal["active", "expired", "revoked"]


class SocialAccountCreate(ApiModel):
    partner_id: int
    platform: SocialPlatform
    account_id: str = Field(min_length=1)
    account_name: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    refresh_token: Optional[str] = None
    token_expiry: Optional[datetime] = None


class SocialAccountUpdate(ApiModel):
    status: AccountStatus


class FacebookConnectRequest(ApiModel):
    partner_id: int
    page_id: str
    access_token: str


class PublishRequest(ApiModel):
    assignment_id: int
    social_account_id: int
    message: Optional[str] = None


def social_account_to_dict(account) -> dict:
    """Tokens are never echoed back to clients."""
    return {
        "id": account.id,
        "partnerId": account.partner_id,
        "platform": account.platform,
        "accountId": account.account_id,
        "accountName": account.account_name,
        "status": account.status,
        "tokenExpiry": isoformat(account.token_expiry),
        "createdAt": isoformat(account.created_at),
    }
