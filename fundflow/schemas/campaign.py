from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import List, Optional

from fundflow.models.base import as_utc, utcnow
from fundflow.models.campaign import CampaignStatus, Category
from fundflow.schemas.donation import PublicDonationResponse

MAX_IMAGES = 5


class CreateCampaignRequest(BaseModel):
    """Request schema for creating a campaign"""
    title: str = Field(..., min_length=1, max_length=255, description="Campaign title is required")
    description: str = Field(..., min_length=1, description="Campaign description is required")
    short_description: Optional[str] = Field(None, max_length=200, description="Teaser shown in listings")
    goal: float = Field(..., gt=0, description="Funding goal, must be greater than 0")
    deadline: datetime = Field(..., description="Campaign end date, must be in the future")
    category: Category = Field(..., description="One of the fixed campaign categories")
    images: List[str] = Field(default_factory=list, max_length=MAX_IMAGES, description="Ordered image references")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Clean Water for Riverside School",
                "description": "Install a filtration system for 400 pupils",
                "short_description": "Safe drinking water for a rural school",
                "goal": 10000,
                "deadline": "2027-12-31T23:59:59Z",
                "category": "Education",
                "images": ["uploads/school-front.jpg"]
            }
        }
    )

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value: datetime) -> datetime:
        value = as_utc(value)
        if value <= utcnow():
            raise ValueError("deadline must be in the future")
        return value


class UpdateCampaignRequest(BaseModel):
    """Editorial fields a creator may change; totals and status are not among them"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    short_description: Optional[str] = Field(None, max_length=200)
    images: Optional[List[str]] = Field(None, max_length=MAX_IMAGES)
    category: Optional[Category] = None

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Clean Water for Riverside School (phase 2)",
                "short_description": "Now also covering the nursery"
            }
        }
    )

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        # None is rejected by the service with a field-specific message
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CampaignUpdatePostRequest(BaseModel):
    """Progress post appended to a campaign"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class CampaignStatusUpdateRequest(BaseModel):
    status: CampaignStatus


class CampaignUpdateResponse(BaseModel):
    id: str
    title: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreatorSummary(BaseModel):
    id: str
    name: str
    profile_pic: str = ""

    model_config = ConfigDict(from_attributes=True)


class CampaignResponse(BaseModel):
    """Response schema for campaign data, including derived progress figures"""
    id: str
    title: str
    description: str
    short_description: Optional[str]
    goal: float
    raised_amount: float
    donors_count: int
    deadline: datetime
    creator_id: str
    creator: Optional[CreatorSummary] = None
    category: Category
    images: List[str]
    status: CampaignStatus
    updates: List[CampaignUpdateResponse] = []
    days_left: int
    progress: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CampaignListResponse(BaseModel):
    """Response schema for one page of public campaigns"""
    campaigns: List[CampaignResponse]
    total: int
    total_pages: int
    current_page: int


class CampaignDetailResponse(BaseModel):
    """Public campaign page: the campaign plus its donations, newest first"""
    campaign: CampaignResponse
    donations: List[PublicDonationResponse]
