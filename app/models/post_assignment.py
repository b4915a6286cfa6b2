"""
Post assignment: distributes one content post to one retail partner.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ..clock import utcnow
from ..database import Base


class PostAssignment(Base):
    __tablename__ = "post_assignments"
    __table_args__ = (UniqueConstraint("post_id", "partner_id", name="uq_assignment_post_partner"),)

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("content_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_id = Column(Integer, ForeignKey("retail_partners.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, published, failed
    custom_footer = Column(Text, nullable=True)
    custom_tags = Column(Text, nullable=True)
    published_url = Column(String(1000), nullable=True)
    published_date = Column(DateTime, nullable=True)
    external_id = Column(String(200), nullable=True)
    extra = Column("metadata", JSON, default=dict)  # evergreen selection
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    post = relationship("ContentPost", back_populates="assignments")
    partner = relationship("RetailPartner", back_populates="assignments")
