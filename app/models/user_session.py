"""
Server-side login session.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from ..clock import utcnow
from ..database import Base


class UserSession(Base):
    __tablename__ = "user_sessions"

    sid = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    impersonated_brand_id = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
