"""
Content post model for brand-authored social media content.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base

POST_STATUSES = ("draft", "scheduled", "published", "automated")


class ContentPost(Base):
    __tablename__ = "content_posts"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(1000), nullable=True)
    platforms = Column(JSON, default=list)  # facebook, instagram
    status = Column(String(20), nullable=False, default="draft", index=True)
    is_evergreen = Column(Boolean, default=False)
    scheduled_date = Column(DateTime, nullable=True)
    published_date = Column(DateTime, nullable=True)
    extra = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    brand = relationship("Brand", back_populates="content_posts")
    assignments = relationship("PostAssignment", back_populates="post", cascade="all, delete")
