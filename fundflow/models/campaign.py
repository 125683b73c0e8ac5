from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
import math

from fundflow.models.base import Base, new_id, utcnow, as_utc


class CampaignStatus(str, enum.Enum):
    """Lifecycle stage; only ACTIVE campaigns are publicly visible"""
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


class Category(str, enum.Enum):
    EDUCATION = "Education"
    HEALTH = "Health"
    TECH = "Tech"
    CHARITY = "Charity"
    ENVIRONMENT = "Environment"
    ARTS = "Arts"
    OTHER = "Other"


class Campaign(Base):
    """Fundraising campaign owned by a creator"""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    short_description = Column(String(200), nullable=True)
    goal = Column(Float, nullable=False)
    # raised_amount and donors_count are only written by the donation ledger
    raised_amount = Column(Float, nullable=False, default=0.0)
    donors_count = Column(Integer, nullable=False, default=0)
    deadline = Column(DateTime(timezone=True), nullable=False)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    category = Column(
        SQLEnum(Category, name="campaign_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    images = Column(JSON, nullable=False, default=list)
    status = Column(
        SQLEnum(CampaignStatus, name="campaign_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CampaignStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    creator = relationship("User", lazy="joined")
    updates = relationship(
        "CampaignUpdate",
        order_by="CampaignUpdate.created_at.desc()",
        lazy="selectin",
    )

    @property
    def days_left(self) -> int:
        remaining = as_utc(self.deadline) - utcnow()
        return max(0, math.ceil(remaining.total_seconds() / 86400))

    @property
    def progress(self) -> float:
        # Not clamped: over-funded campaigns report more than 100
        return self.raised_amount / self.goal * 100

    def __repr__(self):
        return f"<Campaign(id={self.id}, title='{self.title}', status='{self.status.value}')>"


class CampaignUpdate(Base):
    """Progress post published by the campaign creator"""
    __tablename__ = "campaign_updates"

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey("campaigns.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
