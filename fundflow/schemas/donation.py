from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from fundflow.models.donation import PaymentStatus

MAX_MESSAGE_LENGTH = 1000


class PaymentIntentRequest(BaseModel):
    """Schema for starting a card payment"""
    amount: float = Field(..., gt=0, description="Amount in currency units, e.g. 25.50")
    campaign_id: str = Field(..., min_length=1)


class PaymentIntentResponse(BaseModel):
    client_secret: str


class CreateDonationRequest(BaseModel):
    """Schema for a donation recorded without an external payment confirmation"""
    campaign_id: str = Field(..., min_length=1, description="Campaign to donate to")
    amount: float = Field(..., gt=0, description="Donation amount")
    anonymous: bool = Field(default=False, description="Hide donor identity")
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH, description="Optional message from donor")


class RecordDonationRequest(CreateDonationRequest):
    """Schema for recording a donation the payment provider has confirmed"""
    payment_id: str = Field(..., min_length=1, description="Payment provider confirmation id")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "campaign_id": "6f1c2f1e-9d8a-4c55-8a0e-0f2b8d3c9a10",
                "amount": 50.0,
                "payment_id": "pi_3PqExample",
                "anonymous": False,
                "message": "Good luck!"
            }
        }
    )


class UpdateDonationStatusRequest(BaseModel):
    payment_id: str = Field(..., min_length=1, description="Payment provider confirmation id")
    status: PaymentStatus


class DonationResponse(BaseModel):
    """Schema for donation responses"""
    id: str
    donor_id: str
    campaign_id: str
    amount: float
    anonymous: bool
    message: Optional[str]
    payment_id: str
    payment_status: PaymentStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecordDonationResponse(BaseModel):
    success: bool = True
    message: str
    donation: DonationResponse


class CampaignSummary(BaseModel):
    id: str
    title: str
    images: List[str]

    model_config = ConfigDict(from_attributes=True)


class DonorDonationResponse(DonationResponse):
    """A donor's donation paired with the campaign it went to"""
    campaign: Optional[CampaignSummary] = None


class PublicDonationResponse(BaseModel):
    """Donation as shown on a public campaign page"""
    id: str
    amount: float
    anonymous: bool
    message: Optional[str]
    donor_name: Optional[str]
    created_at: datetime
