from .base import Base
from .user import User, Role
from .campaign import Campaign, CampaignUpdate, CampaignStatus, Category
from .donation import Donation, PaymentStatus
from .comment import Comment

__all__ = [
    "Base",
    "User",
    "Role",
    "Campaign",
    "CampaignUpdate",
    "CampaignStatus",
    "Category",
    "Donation",
    "PaymentStatus",
    "Comment",
]
