from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import math
import structlog

from fundflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from fundflow.models.campaign import Campaign, CampaignUpdate, CampaignStatus, Category
from fundflow.models.donation import Donation
from fundflow.models.user import User
from fundflow.schemas.campaign import (
    CreateCampaignRequest,
    UpdateCampaignRequest,
    CampaignUpdatePostRequest,
    CampaignResponse,
    CampaignListResponse,
    CampaignDetailResponse,
)
from fundflow.schemas.donation import PublicDonationResponse

logger = structlog.get_logger(__name__)

SORT_COLUMNS = {
    "created_at": Campaign.created_at,
    "raised_amount": Campaign.raised_amount,
    "deadline": Campaign.deadline,
}


class CampaignService:
    """Business logic for campaign operations"""

    @staticmethod
    def get_campaign_or_404(db: Session, campaign_id: str) -> Campaign:
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            logger.warning("Campaign not found", campaign_id=campaign_id)
            raise NotFoundError("Campaign not found")
        return campaign

    @staticmethod
    def list_public(
        db: Session,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 12,
    ) -> CampaignListResponse:
        """One page of active campaigns matching the filter"""
        query = db.query(Campaign).filter(Campaign.status == CampaignStatus.ACTIVE)

        if category and category != "All":
            try:
                query = query.filter(Campaign.category == Category(category))
            except ValueError:
                raise ValidationError(f"Unknown category: {category}")

        if search:
            query = query.filter(
                Campaign.title.icontains(search, autoescape=True)
                | Campaign.description.icontains(search, autoescape=True)
            )

        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort by {sort_by}")
        ordering = column.asc() if sort_order == "asc" else column.desc()

        total = query.count()
        campaigns = (
            query.order_by(ordering, Campaign.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        logger.info("Public campaigns listed", total=total, page=page, returned=len(campaigns))
        return CampaignListResponse(
            campaigns=[CampaignResponse.model_validate(c) for c in campaigns],
            total=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    @staticmethod
    def get_public_detail(db: Session, campaign_id: str) -> CampaignDetailResponse:
        """Active campaign with its donations, newest first; anything else is a 404"""
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign or campaign.status != CampaignStatus.ACTIVE:
            raise NotFoundError("Campaign not found or not approved")

        donations = (
            db.query(Donation)
            .filter(Donation.campaign_id == campaign_id)
            .order_by(Donation.created_at.desc())
            .all()
        )

        return CampaignDetailResponse(
            campaign=CampaignResponse.model_validate(campaign),
            donations=[
                PublicDonationResponse(
                    id=d.id,
                    amount=d.amount,
                    anonymous=d.anonymous,
                    message=d.message,
                    donor_name=None if d.anonymous or d.donor is None else d.donor.name,
                    created_at=d.created_at,
                )
                for d in donations
            ],
        )

    @staticmethod
    def create_campaign(db: Session, creator: User, campaign_data: CreateCampaignRequest) -> CampaignResponse:
        """Create a campaign awaiting moderation"""
        try:
            db_campaign = Campaign(
                title=campaign_data.title,
                description=campaign_data.description,
                short_description=campaign_data.short_description,
                goal=float(campaign_data.goal),
                deadline=campaign_data.deadline,
                category=campaign_data.category,
                images=list(campaign_data.images),
                creator_id=creator.id,
                status=CampaignStatus.PENDING,
                raised_amount=0.0,
                donors_count=0,
            )
            db.add(db_campaign)
            db.commit()
            db.refresh(db_campaign)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to create campaign", error=str(e), creator_id=creator.id)
            raise

        logger.info("Campaign created", campaign_id=db_campaign.id, creator_id=creator.id)
        return CampaignResponse.model_validate(db_campaign)

    @staticmethod
    def update_campaign(
        db: Session,
        campaign_id: str,
        caller: User,
        campaign_data: UpdateCampaignRequest,
    ) -> CampaignResponse:
        """Owner-only edit of the editorial fields"""
        db_campaign = CampaignService.get_campaign_or_404(db, campaign_id)
        if db_campaign.creator_id != caller.id:
            logger.warning("Campaign update by non-owner", campaign_id=campaign_id, caller_id=caller.id)
            raise AuthorizationError("Not authorized to edit this campaign")

        changes = campaign_data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("title", "description", "category", "images"):
                raise ValidationError(f"{field} cannot be empty")
            setattr(db_campaign, field, value)

        try:
            db.commit()
            db.refresh(db_campaign)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to update campaign", error=str(e), campaign_id=campaign_id)
            raise

        logger.info("Campaign updated", campaign_id=campaign_id, fields=sorted(changes))
        return CampaignResponse.model_validate(db_campaign)

    @staticmethod
    def add_update(
        db: Session,
        campaign_id: str,
        caller: User,
        post: CampaignUpdatePostRequest,
    ) -> CampaignResponse:
        """Append a progress post to the caller's campaign"""
        db_campaign = CampaignService.get_campaign_or_404(db, campaign_id)
        if db_campaign.creator_id != caller.id:
            raise AuthorizationError("Not authorized to post updates for this campaign")

        db.add(CampaignUpdate(campaign_id=campaign_id, title=post.title, content=post.content))
        db.commit()
        db.refresh(db_campaign)

        logger.info("Campaign update posted", campaign_id=campaign_id)
        return CampaignResponse.model_validate(db_campaign)

    @staticmethod
    def list_by_creator(db: Session, creator_id: str) -> List[CampaignResponse]:
        """Every campaign of a creator regardless of status"""
        campaigns = (
            db.query(Campaign)
            .filter(Campaign.creator_id == creator_id)
            .order_by(Campaign.created_at.desc())
            .all()
        )
        return [CampaignResponse.model_validate(c) for c in campaigns]
