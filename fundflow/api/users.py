from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fundflow.api.deps import get_current_user
from fundflow.database.database import get_db
from fundflow.models.user import User
from fundflow.schemas.user import ProfileUpdateRequest, ProfileResponse, UserResponse
from fundflow.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Own profile with the campaigns the user created"""
    return UserService.get_profile(db, user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UserService.update_profile(db, user, data)
