from .user import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    UserStatusUpdateRequest,
    UserResponse,
    ProfileResponse,
    AuthResponse,
)
from .campaign import (
    CreateCampaignRequest,
    UpdateCampaignRequest,
    CampaignUpdatePostRequest,
    CampaignStatusUpdateRequest,
    CampaignResponse,
    CampaignListResponse,
    CampaignDetailResponse,
)
from .donation import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    CreateDonationRequest,
    RecordDonationRequest,
    UpdateDonationStatusRequest,
    DonationResponse,
    RecordDonationResponse,
    DonorDonationResponse,
    PublicDonationResponse,
)
from .admin import DashboardStats, RecentDonation

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "UserStatusUpdateRequest",
    "UserResponse",
    "ProfileResponse",
    "AuthResponse",
    "CreateCampaignRequest",
    "UpdateCampaignRequest",
    "CampaignUpdatePostRequest",
    "CampaignStatusUpdateRequest",
    "CampaignResponse",
    "CampaignListResponse",
    "CampaignDetailResponse",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "CreateDonationRequest",
    "RecordDonationRequest",
    "UpdateDonationStatusRequest",
    "DonationResponse",
    "RecordDonationResponse",
    "DonorDonationResponse",
    "PublicDonationResponse",
    "DashboardStats",
    "RecentDonation",
]
