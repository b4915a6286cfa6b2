from .user import User
from .brand import Brand
from .retail_partner import RetailPartner, PARTNER_STATUSES
from .social_account import SocialAccount
from .content_post import ContentPost, POST_STATUSES
from .post_assignment import PostAssignment
from .media import MediaItem
from .invite import Invite
from .user_session import UserSession

__all__ = [
    "User",
    "Brand",
    "RetailPartner",
    "SocialAccount",
    "ContentPost",
    "PostAssignment",
    "MediaItem",
    "Invite",
    "UserSession",
    "PARTNER_STATUSES",
    "POST_STATUSES",
]
