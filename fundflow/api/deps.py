from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import structlog

from fundflow.core.exceptions import AuthenticationError, AuthorizationError
from fundflow.core.security import decode_access_token
from fundflow.database.database import get_db
from fundflow.models.user import Role, User
from fundflow.services.auth import AuthService
from fundflow.services.notifications import EmailNotifier
from fundflow.services.payment_client import StripePaymentClient

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a live, active user"""
    if credentials is None:
        raise AuthenticationError("Not authorized, no token")

    user_id = decode_access_token(credentials.credentials)
    user = AuthService.get_user(db, user_id)
    if user is None:
        raise AuthenticationError("Not authorized, user not found")
    if not user.is_active:
        logger.warning("Token presented for deactivated account", user_id=user.id)
        raise AuthorizationError("Account is deactivated")
    return user


def require_role(role: Role):
    """Dependency factory admitting only users with exactly this role"""

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            logger.warning("Role check failed", user_id=user.id, role=user.role.value, required=role.value)
            raise AuthorizationError(f"User role {user.role.value} is not authorized to access this route")
        return user

    return checker


def get_payment_client(request: Request) -> StripePaymentClient:
    return request.app.state.payment_client


def get_notifier(request: Request) -> EmailNotifier:
    return request.app.state.notifier
