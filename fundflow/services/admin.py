from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, List, Set
import structlog

from fundflow.core.exceptions import NotFoundError, ValidationError
from fundflow.models.campaign import Campaign, CampaignStatus
from fundflow.models.donation import Donation, PaymentStatus
from fundflow.models.user import User
from fundflow.schemas.admin import DashboardStats, RecentDonation
from fundflow.schemas.campaign import CampaignResponse
from fundflow.schemas.user import UserResponse

logger = structlog.get_logger(__name__)

RECENT_DONATIONS_LIMIT = 10

ALLOWED_TRANSITIONS: Dict[CampaignStatus, Set[CampaignStatus]] = {
    CampaignStatus.PENDING: {CampaignStatus.ACTIVE},
    CampaignStatus.ACTIVE: {CampaignStatus.SUSPENDED},
    CampaignStatus.SUSPENDED: {CampaignStatus.ACTIVE},
}


class AdminService:
    """Moderation and platform statistics"""

    @staticmethod
    def list_users(db: Session) -> List[UserResponse]:
        users = db.query(User).order_by(User.created_at.desc()).all()
        return [UserResponse.model_validate(u) for u in users]

    @staticmethod
    def set_user_active(db: Session, user_id: str, is_active: bool) -> UserResponse:
        """Activate or deactivate an account; the user's campaigns are left alone"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")

        user.is_active = is_active
        db.commit()
        db.refresh(user)

        logger.info("User status changed", user_id=user_id, is_active=is_active)
        return UserResponse.model_validate(user)

    @staticmethod
    def list_campaigns(db: Session) -> List[CampaignResponse]:
        campaigns = db.query(Campaign).order_by(Campaign.created_at.desc()).all()
        return [CampaignResponse.model_validate(c) for c in campaigns]

    @staticmethod
    def set_campaign_status(db: Session, campaign_id: str, new_status: CampaignStatus) -> CampaignResponse:
        """Apply a moderation transition

        Allowed: pending -> active, active -> suspended, suspended -> active.
        """
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            raise NotFoundError("Campaign not found")

        old_status = campaign.status
        if new_status not in ALLOWED_TRANSITIONS.get(old_status, set()):
            logger.warning(
                "Rejected campaign status transition",
                campaign_id=campaign_id,
                old_status=old_status.value,
                new_status=new_status.value,
            )
            raise ValidationError(f"Cannot change campaign status from {old_status.value} to {new_status.value}")

        campaign.status = new_status
        db.commit()
        db.refresh(campaign)

        logger.info(
            "Campaign status changed",
            campaign_id=campaign_id,
            old_status=old_status.value,
            new_status=new_status.value,
        )
        return CampaignResponse.model_validate(campaign)

    @staticmethod
    def dashboard_stats(db: Session) -> DashboardStats:
        total_raised = (
            db.query(func.coalesce(func.sum(Donation.amount), 0.0))
            .filter(Donation.payment_status == PaymentStatus.COMPLETED)
            .scalar()
        )
        recent = (
            db.query(Donation)
            .order_by(Donation.created_at.desc())
            .limit(RECENT_DONATIONS_LIMIT)
            .all()
        )

        return DashboardStats(
            total_users=db.query(func.count(User.id)).scalar(),
            total_campaigns=db.query(func.count(Campaign.id)).scalar(),
            total_donations=db.query(func.count(Donation.id)).scalar(),
            total_raised=float(total_raised),
            recent_donations=[
                RecentDonation(
                    id=d.id,
                    amount=d.amount,
                    payment_status=d.payment_status,
                    anonymous=d.anonymous,
                    donor_name=d.donor.name if d.donor else None,
                    campaign_title=d.campaign.title if d.campaign else None,
                    created_at=d.created_at,
                )
                for d in recent
            ],
        )
