"""
Retail partner model. brand_id is fixed once the row exists.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base

PARTNER_STATUSES = ("pending", "active", "needs_attention", "inactive")


class RetailPartner(Base):
    __tablename__ = "retail_partners"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    footer_template = Column(Text, nullable=True)
    extra = Column("metadata", JSON, default=dict)  # tags, categories
    created_at = Column(DateTime, default=utcnow)
    connection_date = Column(DateTime, nullable=True)

    # Relationships
    brand = relationship("Brand", back_populates="retail_partners")
    user = relationship("User", back_populates="partner_links")
    social_accounts = relationship("SocialAccount", back_populates="partner")
    assignments = relationship("PostAssignment", back_populates="partner", cascade="all, delete")

    @property
    def tags(self):
        extra = self.extra or {}
        return [t for t in extra.get("tags", []) if isinstance(t, str)]
