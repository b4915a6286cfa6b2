from .common import ApiModel
from .auth import UserCreate, UserLogin, user_to_dict
from .brands import BrandCreate, BrandUpdate, AdminBrandUpdate, brand_to_dict
from .partners import (
    RetailPartnerCreate,
    RetailPartnerUpdate,
    BulkPartnerImport,
    PartnerWithUserCreate,
    partner_to_dict,
)
from .posts import (
    ContentPostCreate,
    ContentPostUpdate,
    SchedulePostRequest,
    ReschedulePostRequest,
    EvergreenScheduleRequest,
    post_to_dict,
    assignment_to_dict,
)
from .social import (
    SocialAccountCreate,
    SocialAccountUpdate,
    FacebookConnectRequest,
    PublishRequest,
    social_account_to_dict,
)
from .media import MediaItemCreate, MediaItemUpdate, media_to_dict
from .invites import InviteCreate, invite_to_dict
from .dashboard import DashboardStats, AdminStats, UpcomingPost
