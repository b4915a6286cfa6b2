"""
Facebook Graph API publisher

Posts to Facebook Pages and Instagram Business accounts:
- Facebook: a single feed post on the page
- Instagram: create a media container, then publish it

Every transport or API failure surfaces as UpstreamError.
"""
from typing import List, Optional

import requests

from ..errors import UpstreamError, ValidationFailed
from ..logging_config import social_logger, timed
from .base import AccountCredentials, Page, PublishResult, SocialPublisher

GRAPH_HOST = "https://graph.facebook.com"


class GraphApiPublisher(SocialPublisher):

    def __init__(self, version: str = "v19.0", timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.base_url = f"{GRAPH_HOST}/{version}"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **params) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            if method == "GET":
                response = self.session.get(url, params=params, timeout=self.timeout)
            else:
                response = self.session.post(url, data=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            social_logger.error("Graph API request failed", error=e, path=path)
            raise UpstreamError("Could not reach the Facebook API")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.status_code >= 400 or "error" in payload:
            error = payload.get("error") or {}
            message = error.get("message") or f"HTTP {response.status_code}"
            social_logger.warning(
                "Graph API returned an error",
                path=path,
                status_code=response.status_code,
                error_code=error.get("code"),
            )
            raise UpstreamError(f"Facebook API error: {message}")
        return payload

    # ============================================================
    # PUBLISHING
    # ============================================================

    @timed(social_logger)
    def publish(self, platform: str, account: AccountCredentials, message: str,
                media_url: Optional[str] = None) -> PublishResult:
        if platform == "facebook":
            return self._publish_facebook(account, message, media_url)
        if platform == "instagram":
            return self._publish_instagram(account, message, media_url)
        raise ValidationFailed(f"Unsupported platform: {platform}")

    def _publish_facebook(self, account: AccountCredentials, message: str,
                          media_url: Optional[str]) -> PublishResult:
        params = {"message": message, "access_token": account.access_token}
        if media_url:
            params["link"] = media_url
        payload = self._request("POST", f"{account.account_id}/feed", **params)
        post_id = payload.get("id")
        if not post_id:
            raise UpstreamError("Facebook API returned no post id")
        social_logger.info("Published to Facebook", page_id=account.account_id, post_id=post_id)
        return PublishResult(external_id=post_id, url=f"https://www.facebook.com/{post_id}")

    def _publish_instagram(self, account: AccountCredentials, message: str,
                           media_url: Optional[str]) -> PublishResult:
        if not media_url:
            raise ValidationFailed("Instagram posts require an image")

        container = self._request(
            "POST",
            f"{account.account_id}/media",
            image_url=media_url,
            caption=message,
            access_token=account.access_token,
        )
        published = self._request(
            "POST",
            f"{account.account_id}/media_publish",
            creation_id=container.get("id"),
            access_token=account.access_token,
        )
        media_id = published.get("id")
        if not media_id:
            raise UpstreamError("Instagram API returned no media id")

        details = self._request("GET", media_id, fields="permalink", access_token=account.access_token)
        social_logger.info("Published to Instagram", account_id=account.account_id, media_id=media_id)
        return PublishResult(external_id=media_id, url=details.get("permalink"))

    # ============================================================
    # PAGES
    # ============================================================

    @timed(social_logger)
    def fetch_pages(self, access_token: str) -> List[Page]:
        payload = self._request(
            "GET",
            "me/accounts",
            fields="id,name,access_token,category,instagram_business_account",
            access_token=access_token,
        )
        pages = []
        for item in payload.get("data", []):
            instagram = item.get("instagram_business_account") or {}
            pages.append(Page(
                id=item["id"],
                name=item.get("name", ""),
                access_token=item.get("access_token"),
                category=item.get("category"),
                instagram_account_id=instagram.get("id"),
            ))
        return pages
