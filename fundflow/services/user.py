from sqlalchemy.orm import Session
import structlog

from fundflow.models.campaign import Campaign
from fundflow.models.user import User
from fundflow.schemas.campaign import CampaignResponse
from fundflow.schemas.user import ProfileUpdateRequest, ProfileResponse, UserResponse

logger = structlog.get_logger(__name__)


class UserService:
    """Self-service profile operations"""

    @staticmethod
    def get_profile(db: Session, user: User) -> ProfileResponse:
        campaigns = (
            db.query(Campaign)
            .filter(Campaign.creator_id == user.id)
            .order_by(Campaign.created_at.desc())
            .all()
        )
        return ProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            campaigns=[CampaignResponse.model_validate(c) for c in campaigns],
        )

    @staticmethod
    def update_profile(db: Session, user: User, data: ProfileUpdateRequest) -> UserResponse:
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)

        logger.info("Profile updated", user_id=user.id, fields=sorted(changes))
        return UserResponse.model_validate(user)
