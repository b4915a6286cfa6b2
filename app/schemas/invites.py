from typing import Literal, Optional

from pydantic import Field

from ..clock import isoformat
from .common import ApiModel, EMAIL_PATTERN


class InviteCreate(ApiModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    name: str = Field(min_length=1)
    message: Optional[str] = None
    role: Literal["partner"] = "partner"
    # Honoured for admins only
    brand_id: Optional[int] = None


def invite_to_dict(invite) -> dict:
    return {
        "email": invite.email,
        "name": invite.name,
        "role": invite.role,
        "brandId": invite.brand_id,
        "expiresAt": isoformat(invite.expires_at),
        "token": invite.token,
    }
