"""
Tests for social accounts, publishing and the Graph API client.
"""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from app.errors import UpstreamError, ValidationFailed
from app.models import ContentPost, PostAssignment, SocialAccount
from app.services.evergreen import schedule_rotation
from app.social import AccountCredentials, GraphApiPublisher
from tests.factories import assign, make_account, make_partner, make_post


@pytest.fixture
def account(db, partner):
    return make_account(db, partner, account_id="page-1")


@pytest.fixture
def assignment(db, brand, partner):
    post = make_post(db, brand, "Fall hiking", description="Trails are open", status="scheduled")
    return assign(db, post, partner, custom_footer="Trailhead, Main St.", custom_tags="#hike")


class TestSocialAccounts:

    def test_connect_account(self, partner_client, partner):
        response = partner_client.post(
            "/api/social-accounts",
            json={
                "partnerId": partner.id,
                "platform": "facebook",
                "accountId": "fb-123",
                "accountName": "Trailhead",
                "accessToken": "secret-token",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert data["partnerId"] == partner.id
        assert "accessToken" not in data

    def test_connect_duplicate(self, brand_client, partner, account):
        response = brand_client.post(
            "/api/social-accounts",
            json={
                "partnerId": partner.id,
                "platform": "facebook",
                "accountId": "page-1",
                "accountName": "Again",
                "accessToken": "token",
            },
        )
        assert response.status_code == 409

    def test_connect_to_foreign_partner(self, brand_client, other_partner, db):
        response = brand_client.post(
            "/api/social-accounts",
            json={
                "partnerId": other_partner.id,
                "platform": "facebook",
                "accountId": "fb-9",
                "accountName": "Nope",
                "accessToken": "token",
            },
        )
        assert response.status_code == 403
        assert db.query(SocialAccount).count() == 0

    def test_listing_is_isolated(self, brand_client, other_brand_client, account):
        assert [a["id"] for a in brand_client.get("/api/social-accounts").json()] == [account.id]
        assert other_brand_client.get("/api/social-accounts").json() == []

    def test_partner_account_listing(self, partner_client, other_brand_client, partner, account):
        assert len(partner_client.get(f"/api/social-accounts/partner/{partner.id}").json()) == 1
        assert other_brand_client.get(f"/api/social-accounts/partner/{partner.id}").status_code == 403

    def test_revoke_and_delete(self, partner_client, account, db):
        response = partner_client.patch(f"/api/social-accounts/{account.id}", json={"status": "revoked"})
        assert response.status_code == 200
        assert response.json()["status"] == "revoked"

        account_id = account.id
        assert partner_client.delete(f"/api/social-accounts/{account_id}").status_code == 200
        db.expire_all()
        assert db.get(SocialAccount, account_id) is None

    def test_foreign_delete(self, other_brand_client, account, db):
        assert other_brand_client.delete(f"/api/social-accounts/{account.id}").status_code == 403
        db.expire_all()
        assert db.get(SocialAccount, account.id) is not None

    def test_invalid_status(self, brand_client, account):
        assert brand_client.patch(f"/api/social-accounts/{account.id}", json={"status": "paused"}).status_code == 400


class TestFacebookConnect:

    def test_connect_page(self, partner_client, partner, publisher, db):
        response = partner_client.post(
            "/api/social-accounts/facebook/connect",
            json={"partnerId": partner.id, "pageId": "page-1", "accessToken": "user-token"},
        )
        assert response.status_code == 201
        assert response.json()["accountName"] == "Trailhead Page"
        stored = db.query(SocialAccount).one()
        assert stored.access_token == "page-token"

    def test_unknown_page(self, partner_client, partner):
        response = partner_client.post(
            "/api/social-accounts/facebook/connect",
            json={"partnerId": partner.id, "pageId": "nope", "accessToken": "user-token"},
        )
        assert response.status_code == 400

    def test_list_pages(self, brand_client):
        response = brand_client.get("/api/social/facebook/pages?accessToken=user-token")
        assert response.status_code == 200
        assert response.json() == [
            {"id": "page-1", "name": "Trailhead Page", "category": "Retail", "instagramAccountId": None}
        ]

    def test_pages_upstream_failure(self, brand_client, publisher):
        publisher.error = UpstreamError("Facebook API error: Invalid OAuth access token")
        response = brand_client.get("/api/social/facebook/pages?accessToken=bad")
        assert response.status_code == 502
        assert response.json()["code"] == "UPSTREAM_ERROR"


class TestPublish:

    def test_publish_persists_result(self, partner_client, assignment, account, publisher, db):
        response = partner_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["externalId"] == "page-1_1"
        assert data["assignment"]["status"] == "published"

        call, = publisher.calls
        assert call["message"] == "Trails are open\n\nTrailhead, Main St.\n\n#hike"
        assert call["access_token"] == "page-token"

        db.expire_all()
        stored = db.get(PostAssignment, assignment.id)
        assert stored.external_id == "page-1_1"
        assert stored.published_date is not None
        post = db.get(ContentPost, assignment.post_id)
        assert post.status == "published"
        assert post.published_date is not None

    def test_custom_message(self, brand_client, assignment, account, publisher):
        brand_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id, "message": "Hello"},
        )
        assert publisher.calls[0]["message"] == "Hello"

    def test_upstream_failure_marks_assignment(self, partner_client, assignment, account, publisher, db):
        publisher.error = UpstreamError("Facebook API error: (#200) Permissions error")
        response = partner_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 502
        db.expire_all()
        stored = db.get(PostAssignment, assignment.id)
        assert stored.status == "failed"
        assert stored.extra["lastError"] == "Facebook API error: (#200) Permissions error"
        assert stored.external_id is None

    def test_evergreen_rotation_publishes_selected_post(self, partner_client, brand, partner, account, publisher, db):
        make_post(
            db, brand, "Layer up", description="Layer up for cold trails",
            is_evergreen=True, image_url="https://cdn.example.com/layers.jpg",
        )
        result = schedule_rotation(
            db, brand.id, brand.owner_id, datetime(2026, 11, 3, 9), ["facebook"], [partner.id],
        )
        rotated = result["assignments"][0][0]

        response = partner_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": rotated.id, "socialAccountId": account.id},
        )
        assert response.status_code == 200
        call, = publisher.calls
        assert call["message"] == "Layer up for cold trails"
        assert call["media_url"] == "https://cdn.example.com/layers.jpg"

    def test_account_of_another_partner(self, brand_client, db, brand, assignment, publisher):
        elsewhere = make_partner(db, brand, "Second Store")
        foreign = make_account(db, elsewhere, account_id="page-2")
        response = brand_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": foreign.id},
        )
        assert response.status_code == 403
        assert publisher.calls == []

    def test_other_brand_cannot_publish(self, other_brand_client, assignment, account, publisher):
        response = other_brand_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 403
        assert publisher.calls == []

    def test_platform_mismatch(self, brand_client, assignment, account, publisher):
        response = brand_client.post(
            "/api/social/instagram/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 400
        assert publisher.calls == []

    def test_inactive_account(self, brand_client, assignment, account, db, publisher):
        account.status = "expired"
        db.commit()
        response = brand_client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 400
        assert publisher.calls == []

    def test_unknown_platform(self, brand_client, assignment, account):
        response = brand_client.post(
            "/api/social/myspace/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 400

    def test_unauthenticated(self, client, assignment, account, publisher):
        response = client.post(
            "/api/social/facebook/post",
            json={"assignmentId": assignment.id, "socialAccountId": account.id},
        )
        assert response.status_code == 401
        assert publisher.calls == []


def _response(status_code, payload):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class TestGraphApiPublisher:

    def setup_method(self):
        self.session = MagicMock()
        self.publisher = GraphApiPublisher(version="v19.0", timeout=5, session=self.session)
        self.account = AccountCredentials(account_id="123", access_token="tok")

    def test_facebook_feed_post(self):
        self.session.post.return_value = _response(200, {"id": "123_456"})
        result = self.publisher.publish("facebook", self.account, "Hello", "https://cdn.test/a.jpg")

        assert result.external_id == "123_456"
        assert result.url == "https://www.facebook.com/123_456"
        url = self.session.post.call_args.args[0]
        assert url == "https://graph.facebook.com/v19.0/123/feed"
        assert self.session.post.call_args.kwargs["data"] == {
            "message": "Hello",
            "access_token": "tok",
            "link": "https://cdn.test/a.jpg",
        }

    def test_instagram_container_then_publish(self):
        self.session.post.side_effect = [
            _response(200, {"id": "container-1"}),
            _response(200, {"id": "media-1"}),
        ]
        self.session.get.return_value = _response(200, {"permalink": "https://instagram.com/p/abc"})

        result = self.publisher.publish("instagram", self.account, "Caption", "https://cdn.test/a.jpg")

        assert result.external_id == "media-1"
        assert result.url == "https://instagram.com/p/abc"
        first, second = self.session.post.call_args_list
        assert first.args[0].endswith("/123/media")
        assert second.args[0].endswith("/123/media_publish")
        assert second.kwargs["data"]["creation_id"] == "container-1"

    def test_instagram_requires_image(self):
        with pytest.raises(ValidationFailed):
            self.publisher.publish("instagram", self.account, "Caption")
        self.session.post.assert_not_called()

    def test_api_error(self):
        self.session.post.return_value = _response(400, {"error": {"message": "Invalid token", "code": 190}})
        with pytest.raises(UpstreamError) as exc:
            self.publisher.publish("facebook", self.account, "Hello")
        assert "Invalid token" in exc.value.message

    def test_non_object_payload(self):
        self.session.post.return_value = _response(200, ["unexpected"])
        with pytest.raises(UpstreamError):
            self.publisher.publish("facebook", self.account, "Hello")

    def test_non_object_error_payload(self):
        self.session.post.return_value = _response(500, [{"message": "boom"}])
        with pytest.raises(UpstreamError) as exc:
            self.publisher.publish("facebook", self.account, "Hello")
        assert "HTTP 500" in exc.value.message

    def test_network_error(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(UpstreamError):
            self.publisher.publish("facebook", self.account, "Hello")

    def test_fetch_pages(self):
        self.session.get.return_value = _response(200, {"data": [
            {"id": "p1", "name": "Shop", "access_token": "pt", "category": "Retail",
             "instagram_business_account": {"id": "ig1"}},
            {"id": "p2", "name": "Other"},
        ]})
        pages = self.publisher.fetch_pages("user-token")
        assert [p.id for p in pages] == ["p1", "p2"]
        assert pages[0].instagram_account_id == "ig1"
        assert pages[1].access_token is None
        assert self.session.get.call_args.kwargs["params"]["access_token"] == "user-token"
