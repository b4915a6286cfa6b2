"""
Identity store and brand store.
"""
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..errors import ConflictError
from ..models.brand import Brand
from ..models.user import User
from ..principals import Role
from .base import TenantScopedStore


class UserStore:
    """Users by id, username, email or role. Lookups are indexed queries."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_by_role(self, role: Role) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == Role(role).value)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def ensure_available(self, username: str, email: str) -> None:
        existing = (
            self.db.query(User)
            .filter(or_(User.username == username, User.email == email))
            .first()
        )
        if existing is None:
            return
        if existing.username == username:
            raise ConflictError("Username already exists")
        raise ConflictError("Email already registered")

    def create(
        self,
        username: str,
        email: str,
        hashed_password: str,
        name: str,
        role: Role,
        plan_type: str = "standard",
        commit: bool = True,
    ) -> User:
        self.ensure_available(username, email)
        user = User(
            username=username,
            email=email,
            hashed_password=hashed_password,
            name=name,
            role=Role(role).value,
            plan_type=plan_type,
        )
        self.db.add(user)
        if commit:
            self.db.commit()
            self.db.refresh(user)
        else:
            self.db.flush()
        return user


class BrandStore(TenantScopedStore):
    """Brands are the tenant root, so a brand's own id is its tenant id."""

    model = Brand
    resource_name = "Brand"

    @property
    def brand_column(self):
        return Brand.id

    def brand_id_of(self, record) -> int:
        return record.id

    def create_for_owner(self, owner: User, name: str, plan: str = "standard", logo: Optional[str] = None) -> Brand:
        brand = Brand(id=owner.id, owner_id=owner.id, name=name, plan=plan, logo=logo, extra={})
        self.db.add(brand)
        self.db.commit()
        self.db.refresh(brand)
        return brand
