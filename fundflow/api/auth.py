from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fundflow.api.deps import get_current_user
from fundflow.database.database import get_db
from fundflow.models.user import User
from fundflow.schemas.user import RegisterRequest, LoginRequest, AuthResponse, UserResponse
from fundflow.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a session token"""
    return AuthService.register(db, data)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return AuthService.login(db, data)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """The authenticated user"""
    return UserResponse.model_validate(user)
