from sqlalchemy import Column, String, Float, DateTime, Text, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from fundflow.models.base import Base, new_id, utcnow


class PaymentStatus(str, enum.Enum):
    """Donation payment status; only COMPLETED donations count towards campaign totals"""
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class Donation(Base):
    """Single contribution towards a campaign"""
    __tablename__ = "donations"

    id = Column(String(36), primary_key=True, default=new_id)
    donor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    campaign_id = Column(String(36), ForeignKey("campaigns.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    anonymous = Column(Boolean, nullable=False, default=False)
    message = Column(Text, nullable=True)
    payment_id = Column(String(255), nullable=False, unique=True, index=True)  # payment provider confirmation
    payment_status = Column(
        SQLEnum(PaymentStatus, name="payment_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentStatus.COMPLETED,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    donor = relationship("User", lazy="joined")
    campaign = relationship("Campaign", lazy="joined")

    def __repr__(self):
        return (
            f"<Donation(id={self.id}, campaign_id={self.campaign_id}, "
            f"amount={self.amount}, status='{self.payment_status.value}')>"
        )
