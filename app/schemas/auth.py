from typing import Optional

from pydantic import Field

from .common import ApiModel, EMAIL_PATTERN


class UserCreate(ApiModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    invite_token: Optional[str] = None


class UserLogin(ApiModel):
    username: str
    password: str


def user_to_dict(user) -> dict:
    """Public view of a user. Never includes the password hash."""
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "planType": user.plan_type,
        "active": user.is_active,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }
