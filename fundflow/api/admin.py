from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from fundflow.api.deps import require_role
from fundflow.database.database import get_db
from fundflow.models.user import Role
from fundflow.schemas.admin import DashboardStats
from fundflow.schemas.campaign import CampaignResponse, CampaignStatusUpdateRequest
from fundflow.schemas.user import UserResponse, UserStatusUpdateRequest
from fundflow.services.admin import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(Role.ADMIN))],
)


@router.get("/users", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return AdminService.list_users(db)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user_status(user_id: str, data: UserStatusUpdateRequest, db: Session = Depends(get_db)):
    """Activate or deactivate an account"""
    return AdminService.set_user_active(db, user_id, data.is_active)


@router.get("/campaigns", response_model=List[CampaignResponse])
def list_campaigns(db: Session = Depends(get_db)):
    """Every campaign regardless of status, newest first"""
    return AdminService.list_campaigns(db)


@router.put("/campaigns/{campaign_id}", response_model=CampaignResponse)
def update_campaign_status(
    campaign_id: str,
    data: CampaignStatusUpdateRequest,
    db: Session = Depends(get_db),
):
    return AdminService.set_campaign_status(db, campaign_id, data.status)


@router.get("/stats", response_model=DashboardStats)
def get_stats(db: Session = Depends(get_db)):
    """Platform totals, recomputed on every call"""
    return AdminService.dashboard_stats(db)
