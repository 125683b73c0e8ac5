from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import structlog

from fundflow.core.exceptions import AuthenticationError, AuthorizationError, ConflictError
from fundflow.core.security import hash_password, verify_password, create_access_token
from fundflow.models.user import User
from fundflow.schemas.user import RegisterRequest, LoginRequest, AuthResponse, UserResponse

logger = structlog.get_logger(__name__)


class AuthService:
    """Registration, login and user lookup"""

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def register(db: Session, data: RegisterRequest) -> AuthResponse:
        """Create a user with a hashed password and issue a session token"""
        if AuthService.get_user_by_email(db, data.email):
            logger.warning("Registration rejected, email taken", email=data.email)
            raise ConflictError("User already exists with this email")

        user = User(
            name=data.name,
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            role=data.role,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            raise ConflictError("User already exists with this email")
        db.refresh(user)

        logger.info("User registered", user_id=user.id, role=user.role.value)
        return AuthResponse(token=create_access_token(user.id), user=UserResponse.model_validate(user))

    @staticmethod
    def login(db: Session, data: LoginRequest) -> AuthResponse:
        """Verify credentials and issue a session token"""
        user = AuthService.get_user_by_email(db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("Login failed", email=data.email)
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.warning("Login rejected for deactivated account", user_id=user.id)
            raise AuthorizationError("Account is deactivated")

        logger.info("User logged in", user_id=user.id)
        return AuthResponse(token=create_access_token(user.id), user=UserResponse.model_validate(user))
