from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Tuple
import time
import uuid
import structlog

from fundflow.core.exceptions import ConflictError, NotFoundError
from fundflow.middleware.metrics import donations_recorded_total, donated_amount_total
from fundflow.models.campaign import Campaign
from fundflow.models.donation import Donation, PaymentStatus
from fundflow.models.user import User
from fundflow.schemas.donation import (
    PaymentIntentRequest,
    CreateDonationRequest,
    RecordDonationRequest,
    DonationResponse,
    DonorDonationResponse,
)
from fundflow.services.campaign import CampaignService
from fundflow.services.notifications import DonationNotice
from fundflow.services.payment_client import StripePaymentClient

logger = structlog.get_logger(__name__)


def generate_demo_payment_id() -> str:
    """Payment token for donations recorded without a gateway"""
    return f"demo_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def _apply_campaign_delta(db: Session, campaign_id: str, amount: float, donors: int) -> None:
    # Evaluated by the database so concurrent writers never overwrite each other
    db.query(Campaign).filter(Campaign.id == campaign_id).update(
        {
            Campaign.raised_amount: Campaign.raised_amount + amount,
            Campaign.donors_count: Campaign.donors_count + donors,
        },
        synchronize_session=False,
    )


class DonationService:
    """Business logic for the donation ledger"""

    @staticmethod
    async def create_payment_intent(
        db: Session,
        payment_client: StripePaymentClient,
        intent_data: PaymentIntentRequest,
    ) -> str:
        """Start a card payment; nothing is written to the ledger"""
        CampaignService.get_campaign_or_404(db, intent_data.campaign_id)
        client_secret = await payment_client.create_payment_intent(intent_data.amount, intent_data.campaign_id)
        logger.info("Payment intent created", campaign_id=intent_data.campaign_id, amount=intent_data.amount)
        return client_secret

    @staticmethod
    def record_donation(
        db: Session,
        donor: User,
        donation_data: CreateDonationRequest,
        payment_id: str,
        source: str = "stripe",
    ) -> Tuple[DonationResponse, DonationNotice]:
        """Record a completed donation and credit its campaign in one transaction"""
        campaign = CampaignService.get_campaign_or_404(db, donation_data.campaign_id)

        if db.query(Donation.id).filter(Donation.payment_id == payment_id).first():
            logger.warning("Payment already recorded", payment_id=payment_id)
            raise ConflictError("Donation for this payment has already been recorded")

        notice = DonationNotice(
            donor_email=donor.email,
            donor_name=donor.name,
            creator_email=campaign.creator.email if campaign.creator else None,
            creator_name=campaign.creator.name if campaign.creator else "",
            campaign_id=campaign.id,
            campaign_title=campaign.title,
            amount=donation_data.amount,
            message=donation_data.message,
            anonymous=donation_data.anonymous,
        )

        db_donation = Donation(
            donor_id=donor.id,
            campaign_id=campaign.id,
            amount=donation_data.amount,
            anonymous=donation_data.anonymous,
            message=donation_data.message,
            payment_id=payment_id,
            payment_status=PaymentStatus.COMPLETED,
        )
        try:
            db.add(db_donation)
            db.flush()
            _apply_campaign_delta(db, campaign.id, donation_data.amount, 1)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Payment recorded concurrently", payment_id=payment_id)
            raise ConflictError("Donation for this payment has already been recorded")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to record donation", error=str(e), campaign_id=campaign.id)
            raise
        db.refresh(db_donation)

        donations_recorded_total.labels(source=source).inc()
        donated_amount_total.inc(donation_data.amount)
        logger.info(
            "Donation recorded",
            donation_id=db_donation.id,
            donor_id=donor.id,
            campaign_id=campaign.id,
            amount=db_donation.amount,
            source=source,
        )
        return DonationResponse.model_validate(db_donation), notice

    @staticmethod
    def record_stripe_donation(
        db: Session, donor: User, donation_data: RecordDonationRequest
    ) -> Tuple[DonationResponse, DonationNotice]:
        return DonationService.record_donation(db, donor, donation_data, donation_data.payment_id)

    @staticmethod
    def create_manual_donation(
        db: Session, donor: User, donation_data: CreateDonationRequest
    ) -> Tuple[DonationResponse, DonationNotice]:
        return DonationService.record_donation(
            db, donor, donation_data, generate_demo_payment_id(), source="manual"
        )

    @staticmethod
    def update_donation_status(db: Session, payment_id: str, new_status: PaymentStatus) -> DonationResponse:
        """Move a donation to a new status, adjusting campaign totals on real transitions"""
        db_donation = db.query(Donation).filter(Donation.payment_id == payment_id).first()
        if not db_donation:
            logger.warning("Donation not found for status update", payment_id=payment_id)
            raise NotFoundError("Donation not found")

        old_status = db_donation.payment_status
        if old_status == new_status:
            logger.info("Donation status unchanged", payment_id=payment_id, status=new_status.value)
            return DonationResponse.model_validate(db_donation)

        # Compare-and-set on the old status; a concurrent change leaves nothing to update
        changed = (
            db.query(Donation)
            .filter(Donation.id == db_donation.id, Donation.payment_status == old_status)
            .update({Donation.payment_status: new_status}, synchronize_session=False)
        )
        if changed != 1:
            db.rollback()
            raise ConflictError("Donation status changed concurrently, retry the update")

        if new_status == PaymentStatus.COMPLETED:
            _apply_campaign_delta(db, db_donation.campaign_id, db_donation.amount, 1)
        elif old_status == PaymentStatus.COMPLETED:
            _apply_campaign_delta(db, db_donation.campaign_id, -db_donation.amount, -1)

        db.commit()
        db.refresh(db_donation)

        logger.info(
            "Donation status updated",
            payment_id=payment_id,
            old_status=old_status.value,
            new_status=new_status.value,
        )
        return DonationResponse.model_validate(db_donation)

    @staticmethod
    def list_by_donor(db: Session, donor_id: str) -> List[DonorDonationResponse]:
        donations = (
            db.query(Donation)
            .filter(Donation.donor_id == donor_id)
            .order_by(Donation.created_at.desc())
            .all()
        )
        logger.info("Donations retrieved", donor_id=donor_id, count=len(donations))
        return [DonorDonationResponse.model_validate(d) for d in donations]
