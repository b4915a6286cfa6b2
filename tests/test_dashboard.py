"""
Tests for dashboard statistics and health checks.
"""
from datetime import timedelta

from app.clock import utcnow
from tests.factories import assign, make_account, make_partner, make_post, make_user


class TestDashboardStats:

    def test_brand_counts(self, brand_client, brand, other_brand, partner, db):
        make_partner(db, brand, "Active Store", status="active")
        make_partner(db, other_brand, "Elsewhere", status="active")
        soon = make_post(db, brand, "Soon", status="scheduled", scheduled_date=utcnow() + timedelta(days=1))
        make_post(db, brand, "Live", status="published")
        make_post(db, other_brand, "Theirs", status="scheduled", scheduled_date=utcnow() + timedelta(days=1))
        make_account(db, partner)
        assign(db, soon, partner)

        response = brand_client.get("/api/dashboard-stats")
        assert response.status_code == 200
        data = response.json()
        assert data["totalPartners"] == 2
        assert data["activePartners"] == 1
        assert data["pendingPartners"] == 1
        assert data["totalPosts"] == 2
        assert data["scheduledPosts"] == 1
        assert data["publishedPosts"] == 1
        assert data["connectedAccounts"] == 1
        assert data["upcomingPosts"] == [
            {"id": soon.id, "title": "Soon", "scheduledDate": soon.scheduled_date.isoformat(), "partners": 1}
        ]

    def test_partner_counts_own_rows(self, partner_client, brand, partner, db):
        sibling = make_partner(db, brand, "Sibling Store")
        assigned = make_post(db, brand, "Assigned", status="scheduled", scheduled_date=utcnow() + timedelta(days=2))
        make_post(db, brand, "Not mine", status="scheduled", scheduled_date=utcnow() + timedelta(days=2))
        assign(db, assigned, partner)
        assign(db, assigned, sibling)

        data = partner_client.get("/api/dashboard-stats").json()
        assert data["totalPartners"] == 1
        assert data["totalPosts"] == 1
        assert [p["id"] for p in data["upcomingPosts"]] == [assigned.id]
        assert data["upcomingPosts"][0]["partners"] == 1

    def test_unlinked_partner_gets_zeros(self, login, db, brand):
        make_user(db, "loner", "partner")
        make_post(db, brand, "Post")
        data = login("loner").get("/api/dashboard-stats").json()
        assert data["totalPosts"] == 0
        assert data["upcomingPosts"] == []

    def test_requires_login(self, client):
        assert client.get("/api/dashboard-stats").status_code == 401


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"]["backend"] == "sqlite"
        assert data["sessions"] == {"status": "healthy", "backend": "MemorySessionStore"}
        assert data["integrations"]["mail"] == "log-only"

    def test_live(self, client):
        assert client.get("/api/health/live").json()["ok"] is True

    def test_system(self, client):
        assert "memory_percent" in client.get("/api/health/system").json()
