"""
Social account model: one Facebook page or Instagram business account owned by a retail partner.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base


class SocialAccount(Base):
    __tablename__ = "social_accounts"
    __table_args__ = (UniqueConstraint("platform", "account_id", name="uq_social_account_platform"),)

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey("retail_partners.id"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)  # facebook, instagram
    account_id = Column(String(100), nullable=False)
    account_name = Column(String(200), nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    token_expiry = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active, expired, revoked
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    partner = relationship("RetailPartner", back_populates="social_accounts")
