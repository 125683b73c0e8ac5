from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from fundflow.models.donation import PaymentStatus


class RecentDonation(BaseModel):
    id: str
    amount: float
    payment_status: PaymentStatus
    anonymous: bool
    donor_name: Optional[str]
    campaign_title: Optional[str]
    created_at: datetime


class DashboardStats(BaseModel):
    """Platform totals for the admin dashboard, recomputed on every request"""
    total_users: int
    total_campaigns: int
    total_donations: int
    total_raised: float
    recent_donations: List[RecentDonation]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_users": 120,
                "total_campaigns": 14,
                "total_donations": 310,
                "total_raised": 18250.0,
                "recent_donations": []
            }
        }
    )
