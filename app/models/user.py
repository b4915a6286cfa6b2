"""
User model for authentication and role assignment.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default="brand", index=True)  # admin, brand, partner
    plan_type = Column(String(20), default="standard")  # standard, premium
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    brand = relationship("Brand", back_populates="owner", uselist=False, foreign_keys="Brand.owner_id")
    partner_links = relationship("RetailPartner", back_populates="user")
