"""
Brand model. A brand is the tenant root and shares its owner's user id.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    plan = Column(String(20), default="standard")
    active = Column(Boolean, default=True)
    logo = Column(String(500), nullable=True)
    primary_color = Column(String(20), nullable=True)
    extra = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    owner = relationship("User", back_populates="brand", foreign_keys=[owner_id])
    retail_partners = relationship("RetailPartner", back_populates="brand")
    content_posts = relationship("ContentPost", back_populates="brand")
