"""
Pytest configuration and fixtures for Ignyt API tests.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import get_session_store
from app.database import Base, get_db
from app.limiter import limiter
from app.main import app
from app.services.email import LoggingMailer, get_mailer
from app.sessions import MemorySessionStore
from app.social import Page, PublishResult, SocialPublisher, get_publisher
from tests.factories import PASSWORD, make_brand, make_partner, make_user

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


class FakePublisher(SocialPublisher):
    """Records publish calls instead of talking to the Graph API."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.pages = [Page(id="page-1", name="Trailhead Page", access_token="page-token", category="Retail")]

    def publish(self, platform, account, message, media_url=None):
        self.calls.append({
            "platform": platform,
            "account_id": account.account_id,
            "access_token": account.access_token,
            "message": message,
            "media_url": media_url,
        })
        if self.error:
            raise self.error
        external_id = f"{account.account_id}_{len(self.calls)}"
        return PublishResult(external_id=external_id, url=f"https://www.facebook.com/{external_id}")

    def fetch_pages(self, access_token):
        if self.error:
            raise self.error
        return list(self.pages)


@pytest.fixture(scope="function")
def session_store():
    return MemorySessionStore(ttl_seconds=3600)


@pytest.fixture(scope="function")
def publisher():
    return FakePublisher()


@pytest.fixture(scope="function")
def db(session_store, publisher):
    """Create a fresh database for each test."""
    global _test_session

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create a session
    _test_session = TestingSessionLocal()

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_publisher] = lambda: publisher
    app.dependency_overrides[get_mailer] = LoggingMailer

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    # Drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


# ============================================================
# DATA
# ============================================================

@pytest.fixture(scope="function")
def admin_user(db):
    return make_user(db, "admin", "admin", name="Platform Admin")


@pytest.fixture(scope="function")
def brand(db):
    """The brand most tests act as."""
    return make_brand(db, "acme", "Acme Outdoor")


@pytest.fixture(scope="function")
def other_brand(db):
    return make_brand(db, "globex", "Globex Gear")


@pytest.fixture(scope="function")
def partner_user(db):
    return make_user(db, "trailhead", "partner", name="Trailhead Owner")


@pytest.fixture(scope="function")
def partner(db, brand, partner_user):
    """Retail partner of ``brand`` managed by ``partner_user``."""
    return make_partner(db, brand, "Trailhead Outfitters", user=partner_user)


@pytest.fixture(scope="function")
def other_partner(db, other_brand):
    return make_partner(db, other_brand, "Globex Corner Shop")


# ============================================================
# CLIENTS
# ============================================================

@pytest.fixture(scope="function")
def login(db):
    """Factory returning a fresh client logged in as ``username``."""
    def _login(username, password=PASSWORD):
        c = TestClient(app)
        response = c.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return c

    return _login


@pytest.fixture(scope="function")
def admin_client(login, admin_user):
    return login(admin_user.username)


@pytest.fixture(scope="function")
def brand_client(login, brand):
    return login("acme")


@pytest.fixture(scope="function")
def other_brand_client(login, other_brand):
    return login("globex")


@pytest.fixture(scope="function")
def partner_client(login, partner):
    return login("trailhead")
