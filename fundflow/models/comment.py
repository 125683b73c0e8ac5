from sqlalchemy import Column, String, DateTime, ForeignKey

from fundflow.models.base import Base, new_id, utcnow


class Comment(Base):
    """Free-text remark on a campaign"""
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey("campaigns.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    text = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
