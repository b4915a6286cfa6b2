"""
Media library item. Files live elsewhere; only the URL is stored.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey

from ..clock import utcnow
from ..database import Base


class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    file_url = Column(String(1000), nullable=False)
    file_type = Column(String(50), nullable=False, default="image")  # image, video, document
    description = Column(Text, nullable=True)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
