"""
Seed a development database with an admin, a demo brand and two partners.

Run against a persistent database (DATABASE_URL), e.g.:
    DATABASE_URL=sqlite:///./ignyt.db python seed.py
"""
from datetime import timedelta

from app import models  # noqa: F401
from app.auth import get_password_hash
from app.clock import utcnow
from app.config import get_settings
from app.database import Base, engine, get_db_context
from app.principals import Role
from app.stores.partners import RetailPartnerStore
from app.stores.posts import ContentPostStore
from app.stores.users import BrandStore, UserStore

settings = get_settings()

# Create tables
Base.metadata.create_all(bind=engine)

with get_db_context() as db:
    users = UserStore(db)

    if users.get_by_username("admin") is None:
        users.create(
            username="admin",
            email="admin@ignyt.local",
            hashed_password=get_password_hash("admin-password"),
            name="Platform Admin",
            role=Role.ADMIN,
        )

    brand_user = users.get_by_username(settings.demo_username)
    if brand_user is None:
        brand_user = users.create(
            username=settings.demo_username,
            email="demo@ignyt.local",
            hashed_password=get_password_hash(settings.demo_password),
            name="Demo Outdoor Co",
            role=Role.BRAND,
        )
        brand = BrandStore(db).create_for_owner(brand_user, name="Demo Outdoor Co")

        partners = RetailPartnerStore(db)
        partners.create(brand.id, {
            "name": "Trailhead Outfitters",
            "contact_email": "hello@trailhead.local",
            "status": "active",
            "footer_template": "Visit us at Trailhead Outfitters!",
            "extra": {"tags": ["Outdoor", "Gear"]},
        })
        partners.create(brand.id, {
            "name": "City Sports",
            "contact_email": "team@citysports.local",
            "extra": {"tags": ["Urban", "Sale"]},
        })

        ContentPostStore(db).create(
            brand.id,
            {
                "title": "Autumn trail collection",
                "description": "Our new trail range is in stores now.",
                "platforms": ["facebook", "instagram"],
                "is_evergreen": True,
                "scheduled_date": utcnow() + timedelta(days=3),
            },
            creator_id=brand_user.id,
        )

print("Seed data created successfully!")
