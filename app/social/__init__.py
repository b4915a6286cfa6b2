"""
Outbound social publishing.
"""
from functools import lru_cache

from ..config import get_settings
from .base import AccountCredentials, Page, PublishResult, SocialPublisher
from .graph import GraphApiPublisher


@lru_cache()
def get_publisher() -> SocialPublisher:
    """FastAPI dependency returning the process-wide publisher."""
    settings = get_settings()
    return GraphApiPublisher(version=settings.graph_api_version, timeout=settings.graph_api_timeout)


__all__ = [
    "AccountCredentials",
    "Page",
    "PublishResult",
    "SocialPublisher",
    "GraphApiPublisher",
    "get_publisher",
]
