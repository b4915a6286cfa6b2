from typing import Dict, List

from .common import ApiModel


class UpcomingPost(ApiModel):
    id: int
    title: str
    scheduled_date: str
    partners: int


class DashboardStats(ApiModel):
    total_partners: int
    active_partners: int
    pending_partners: int
    total_posts: int
    scheduled_posts: int
    published_posts: int
    connected_accounts: int
    media_items: int
    upcoming_posts: List[UpcomingPost] = []


class AdminStats(ApiModel):
    total_brands: int
    active_brands: int
    total_partners: int
    total_posts: int
    published_posts: int
    users_by_role: Dict[str, int]
