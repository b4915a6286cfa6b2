"""
Tests for content posts, scheduling, the calendar and evergreen rotation.
"""
import random
from datetime import datetime

import pytest

from app.errors import NotFound
from app.models import ContentPost, PostAssignment
from app.services.evergreen import schedule_rotation
from tests.factories import assign, make_partner, make_post


class TestCreatePost:

    def test_draft_by_default(self, brand_client, brand):
        response = brand_client.post(
            "/api/content-posts",
            json={"title": "Spring sale", "description": "20% off", "platforms": ["facebook"]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert data["brandId"] == brand.id
        assert data["creatorId"] == brand.owner_id
        assert data["publishedDate"] is None

    def test_scheduled_when_dated(self, brand_client):
        response = brand_client.post(
            "/api/content-posts",
            json={
                "title": "Launch",
                "description": "New tent",
                "platforms": ["facebook", "instagram"],
                "scheduledDate": "2026-11-01T10:00:00Z",
            },
        )
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["scheduledDate"] == "2026-11-01T10:00:00"

    def test_brand_id_in_body_ignored_for_brand(self, brand_client, brand, other_brand):
        response = brand_client.post(
            "/api/content-posts",
            json={"title": "Sneaky", "description": "x", "platforms": ["facebook"], "brandId": other_brand.id},
        )
        assert response.json()["brandId"] == brand.id

    def test_admin_needs_brand(self, admin_client, brand):
        body = {"title": "Admin post", "description": "x", "platforms": ["facebook"]}
        assert admin_client.post("/api/content-posts", json=body).status_code == 400

        response = admin_client.post(f"/api/content-posts?brandId={brand.id}", json=body)
        assert response.status_code == 201
        assert response.json()["brandId"] == brand.id

    def test_missing_platforms(self, brand_client):
        response = brand_client.post("/api/content-posts", json={"title": "x", "description": "y", "platforms": []})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_partner_cannot_create(self, partner_client):
        response = partner_client.post(
            "/api/content-posts",
            json={"title": "x", "description": "y", "platforms": ["facebook"]},
        )
        assert response.status_code == 403


class TestPostAccess:

    def test_listing_is_isolated(self, brand_client, brand, other_brand, db):
        own = make_post(db, brand, "Ours")
        make_post(db, other_brand, "Theirs")
        listing = brand_client.get("/api/content-posts").json()
        assert [p["id"] for p in listing] == [own.id]

    def test_status_filter(self, brand_client, brand, db):
        make_post(db, brand, "Draft")
        published = make_post(db, brand, "Live", status="published")
        listing = brand_client.get("/api/content-posts?status=published").json()
        assert [p["id"] for p in listing] == [published.id]

    def test_cross_brand_read(self, brand_client, other_brand, db):
        post = make_post(db, other_brand, "Theirs")
        response = brand_client.get(f"/api/content-posts/{post.id}")
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_cross_brand_update_leaves_post(self, brand_client, other_brand, db):
        post = make_post(db, other_brand, "Theirs")
        response = brand_client.patch(f"/api/content-posts/{post.id}", json={"title": "Mine now"})
        assert response.status_code == 403
        db.refresh(post)
        assert post.title == "Theirs"

    def test_missing_post(self, brand_client):
        assert brand_client.get("/api/content-posts/999").status_code == 404

    def test_unauthenticated(self, client):
        assert client.get("/api/content-posts").status_code == 401
        assert client.get("/api/content-posts/1").status_code == 401

    def test_partner_sees_assigned_only(self, partner_client, brand, partner, db):
        assigned = make_post(db, brand, "Assigned", status="scheduled")
        make_post(db, brand, "Unassigned")
        assign(db, assigned, partner)

        listing = partner_client.get("/api/content-posts").json()
        assert [p["id"] for p in listing] == [assigned.id]

    def test_partner_reads_assigned_post(self, partner_client, brand, partner, db):
        post = make_post(db, brand, "Assigned")
        other = make_partner(db, brand, "Second Store")
        assign(db, post, partner)
        assign(db, post, other)

        response = partner_client.get(f"/api/content-posts/{post.id}")
        assert response.status_code == 200
        assert [a["partnerId"] for a in response.json()["assignments"]] == [partner.id]

    def test_partner_cannot_read_unassigned(self, partner_client, brand, partner, db):
        post = make_post(db, brand, "Hidden")
        assert partner_client.get(f"/api/content-posts/{post.id}").status_code == 403

    def test_partner_cannot_update(self, partner_client, brand, partner, db):
        post = make_post(db, brand, "Assigned")
        assign(db, post, partner)
        assert partner_client.patch(f"/api/content-posts/{post.id}", json={"title": "x"}).status_code == 403


class TestUpdatePost:

    def test_published_date_stamped_once(self, brand_client, brand, db):
        post = make_post(db, brand, "Post")
        first = brand_client.patch(f"/api/content-posts/{post.id}", json={"status": "published"}).json()
        assert first["publishedDate"] is not None

        brand_client.patch(f"/api/content-posts/{post.id}", json={"status": "draft"})
        again = brand_client.patch(f"/api/content-posts/{post.id}", json={"status": "published"}).json()
        assert again["publishedDate"] == first["publishedDate"]

    def test_brand_id_not_writable(self, brand_client, brand, other_brand, db):
        post = make_post(db, brand, "Post")
        brand_client.patch(f"/api/content-posts/{post.id}", json={"brandId": other_brand.id, "title": "Renamed"})
        db.refresh(post)
        assert post.brand_id == brand.id
        assert post.title == "Renamed"

    def test_delete_cascades_assignments(self, brand_client, brand, partner, db):
        post = make_post(db, brand, "Post")
        assignment_id = assign(db, post, partner).id
        post_id = post.id

        response = brand_client.delete(f"/api/content-posts/{post_id}")
        assert response.status_code == 200
        db.expire_all()
        assert db.get(ContentPost, post_id) is None
        assert db.get(PostAssignment, assignment_id) is None


class TestScheduling:

    def test_schedule_assigns_partners(self, brand_client, brand, partner, db):
        post = make_post(db, brand, "Post")
        second = make_partner(db, brand, "Second Store")

        response = brand_client.post(
            f"/api/content-posts/{post.id}/schedule",
            json={
                "scheduledDate": "2026-11-05T09:00:00Z",
                "partnerIds": [partner.id, second.id],
                "customFooter": "Visit us",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["scheduledDate"] == "2026-11-05T09:00:00"
        assert {a["partnerId"] for a in data["assignments"]} == {partner.id, second.id}
        assert all(a["status"] == "pending" for a in data["assignments"])
        assert all(a["customFooter"] == "Visit us" for a in data["assignments"])

    def test_schedule_twice_keeps_one_assignment(self, brand_client, brand, partner, db):
        post = make_post(db, brand, "Post")
        body = {"scheduledDate": "2026-11-05T09:00:00Z", "partnerIds": [partner.id]}
        brand_client.post(f"/api/content-posts/{post.id}/schedule", json=body)
        brand_client.post(f"/api/content-posts/{post.id}/schedule", json=body)
        assert db.query(PostAssignment).filter(PostAssignment.post_id == post.id).count() == 1

    def test_foreign_partner_rejected(self, brand_client, brand, other_partner, db):
        post = make_post(db, brand, "Post")
        response = brand_client.post(
            f"/api/content-posts/{post.id}/schedule",
            json={"scheduledDate": "2026-11-05T09:00:00Z", "partnerIds": [other_partner.id]},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == {"partnerIds": [other_partner.id]}
        assert db.query(PostAssignment).count() == 0

    def test_reschedule_draft(self, brand_client, brand, db):
        post = make_post(db, brand, "Post")
        response = brand_client.post(
            f"/api/content-posts/{post.id}/reschedule",
            json={"newDate": "2026-12-01T08:30:00Z"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "scheduled"
        assert response.json()["scheduledDate"] == "2026-12-01T08:30:00"

    def test_calendar_range(self, brand_client, brand, partner, db):
        inside = make_post(db, brand, "Inside", status="scheduled", scheduled_date=datetime(2026, 11, 10, 12))
        make_post(db, brand, "Outside", status="scheduled", scheduled_date=datetime(2027, 1, 10, 12))
        make_post(db, brand, "Draft", scheduled_date=datetime(2026, 11, 12, 12))
        assign(db, inside, partner)

        response = brand_client.get(
            "/api/content-posts/calendar?start_date=2026-11-01T00:00:00&end_date=2026-11-30T23:59:59"
        )
        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data] == [inside.id]
        assert data[0]["assignments"][0]["partnerName"] == "Trailhead Outfitters"

    def test_partner_post_feed(self, partner_client, brand, partner, db):
        post = make_post(db, brand, "Assigned", status="scheduled")
        assign(db, post, partner)

        response = partner_client.get("/api/partner/posts")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["post"]["title"] == "Assigned"
        assert data[0]["partnerName"] == "Trailhead Outfitters"

    def test_partner_feed_brand_forbidden(self, brand_client):
        assert brand_client.get("/api/partner/posts").status_code == 403


class TestEvergreen:

    def test_rotation_avoids_repeats(self, db, brand, partner):
        first = make_post(db, brand, "Tip one", is_evergreen=True)
        second = make_post(db, brand, "Tip two", is_evergreen=True)

        picks = []
        for day in (1, 2):
            result = schedule_rotation(
                db,
                brand_id=brand.id,
                creator_id=brand.owner_id,
                scheduled_date=datetime(2026, 11, day, 9),
                platforms=["facebook"],
                partner_ids=[partner.id],
                rng=random.Random(7),
            )
            (_, selected, _), = result["assignments"]
            picks.append(selected.id)
        assert sorted(picks) == sorted([first.id, second.id])

    def test_rotation_restarts_when_exhausted(self, db, brand, partner):
        only = make_post(db, brand, "Only tip", is_evergreen=True)
        for day in (1, 2):
            result = schedule_rotation(
                db, brand.id, brand.owner_id, datetime(2026, 11, day, 9), ["facebook"], [partner.id],
            )
            assert result["assignments"][0][1].id == only.id

    def test_platform_filter(self, db, brand, partner):
        make_post(db, brand, "Facebook only", is_evergreen=True, platforms=["facebook"])
        with pytest.raises(NotFound):
            schedule_rotation(db, brand.id, brand.owner_id, datetime(2026, 11, 1), ["instagram"], [partner.id])

    def test_endpoint(self, brand_client, brand, partner, db):
        tip = make_post(db, brand, "Tip", is_evergreen=True)
        response = brand_client.post(
            "/api/content-posts/evergreen-schedule",
            json={"scheduledDate": "2026-11-03T09:00:00Z", "platforms": ["facebook"], "partnerIds": [partner.id]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["partners"] == 1
        assert data["parentPost"]["metadata"]["isScheduledEvergreen"] is True
        assert data["assignments"][0]["selectedPost"]["id"] == tip.id
        assert data["assignments"][0]["assignment"]["metadata"]["selectedEvergreenPostId"] == tip.id

    def test_endpoint_foreign_partners(self, brand_client, brand, other_partner, db):
        make_post(db, brand, "Tip", is_evergreen=True)
        response = brand_client.post(
            "/api/content-posts/evergreen-schedule",
            json={"scheduledDate": "2026-11-03T09:00:00Z", "platforms": ["facebook"], "partnerIds": [other_partner.id]},
        )
        assert response.status_code == 404

    def test_evergreen_listing(self, brand_client, brand, db):
        tip = make_post(db, brand, "Tip", is_evergreen=True)
        make_post(db, brand, "Regular")
        assert [p["id"] for p in brand_client.get("/api/content-posts/evergreen").json()] == [tip.id]
