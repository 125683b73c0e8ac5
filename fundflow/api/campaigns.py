from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Literal, Optional

from fundflow.api.deps import get_current_user, require_role
from fundflow.database.database import get_db
from fundflow.models.user import Role, User
from fundflow.schemas.campaign import (
    CreateCampaignRequest,
    UpdateCampaignRequest,
    CampaignUpdatePostRequest,
    CampaignResponse,
    CampaignListResponse,
    CampaignDetailResponse,
)
from fundflow.services.campaign import CampaignService

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.get("", response_model=CampaignListResponse)
def list_campaigns(
    category: Optional[str] = Query(None, description="Category name, or All"),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    sort_by: Literal["created_at", "raised_amount", "deadline"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Browse active campaigns"""
    return CampaignService.list_public(
        db,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.get("/user/{user_id}", response_model=List[CampaignResponse])
def list_user_campaigns(
    user_id: str,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All campaigns of a creator, whatever their status"""
    return CampaignService.list_by_creator(db, user_id)


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
def get_campaign(campaign_id: str, db: Session = Depends(get_db)):
    return CampaignService.get_public_detail(db, campaign_id)


@router.post("", response_model=CampaignResponse, status_code=201)
def create_campaign(
    campaign_data: CreateCampaignRequest,
    creator: User = Depends(require_role(Role.CREATOR)),
    db: Session = Depends(get_db),
):
    """Submit a campaign for moderation"""
    return CampaignService.create_campaign(db, creator, campaign_data)


@router.put("/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: str,
    campaign_data: UpdateCampaignRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CampaignService.update_campaign(db, campaign_id, user, campaign_data)


@router.post("/{campaign_id}/updates", response_model=CampaignResponse, status_code=201)
def post_campaign_update(
    campaign_id: str,
    post: CampaignUpdatePostRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Publish a progress post on the caller's campaign"""
    return CampaignService.add_update(db, campaign_id, user, post)
