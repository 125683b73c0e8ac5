from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import List, Optional

from fundflow.models.user import Role
from fundflow.schemas.campaign import CampaignResponse


class SocialLinks(BaseModel):
    website: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None


class RegisterRequest(BaseModel):
    """Request schema for registering a user"""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Unique email address, compared case-insensitively")
    password: str = Field(..., min_length=6, description="Plain password, hashed before storage")
    role: Role = Field(default=Role.DONOR, description="donor, creator or admin")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Jane Creator",
                "email": "jane@example.com",
                "password": "s3cretpass",
                "role": "creator"
            }
        }
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    bio: Optional[str] = Field(None, max_length=500)
    social_links: Optional[SocialLinks] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class UserStatusUpdateRequest(BaseModel):
    is_active: bool


class UserResponse(BaseModel):
    """Public user fields; the password hash is never part of a response"""
    id: str
    name: str
    email: str
    role: Role
    profile_pic: str = ""
    bio: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    is_active: bool
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    """Own profile together with the campaigns the user created"""
    campaigns: List[CampaignResponse] = []


class AuthResponse(BaseModel):
    token: str
    user: UserResponse
