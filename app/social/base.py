"""
Publisher interface shared by the social platforms.
"""
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class AccountCredentials:
    """The target account of a publish: external id plus its access token."""
    account_id: str
    access_token: str


@dataclass
class PublishResult:
    """Result of a successful publish"""
    external_id: str
    url: Optional[str]


@dataclass
class Page:
    """A Facebook page the token's user manages"""
    id: str
    name: str
    access_token: Optional[str] = None
    category: Optional[str] = None
    instagram_account_id: Optional[str] = None


class SocialPublisher:
    """Outbound posting to social platforms."""

    def publish(self, platform: str, account: AccountCredentials, message: str,
                media_url: Optional[str] = None) -> PublishResult:
        raise NotImplementedError

    def fetch_pages(self, access_token: str) -> List[Page]:
        raise NotImplementedError
