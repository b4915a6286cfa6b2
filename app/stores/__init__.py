from .base import TenantScopedStore
from .users import UserStore, BrandStore
from .partners import RetailPartnerStore, DEFAULT_PARTNER_TAGS
from .posts import ContentPostStore
from .assignments import PostAssignmentStore
from .social_accounts import SocialAccountStore
from .media import MediaStore
from .invites import InviteStore

__all__ = [
    "TenantScopedStore",
    "UserStore",
    "BrandStore",
    "RetailPartnerStore",
    "ContentPostStore",
    "PostAssignmentStore",
    "SocialAccountStore",
    "MediaStore",
    "InviteStore",
    "DEFAULT_PARTNER_TAGS",
]
