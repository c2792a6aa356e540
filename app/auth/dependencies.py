"""
Authentication gate for the admin endpoints.

Callers send HTTP Basic credentials; only active superusers are admitted.
"""
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from app.core.security import verify_password
from app.crud import get_user_by_username
from app.db.session import get_db
from app.models.user_model import User

logger = logging.getLogger(__name__)

security = HTTPBasic(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Basic"},
    )


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    if credentials is None:
        raise _unauthorized()

    user = get_user_by_username(db, credentials.username)
    if not user or not user.is_active or not user.hashed_password:
        raise _unauthorized()
    if not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Invalid password for user {credentials.username}")
        raise _unauthorized()
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Only superusers may run bulk operations and exports."""
    if not current_user.is_superuser:
        logger.warning(f"User {current_user.username} is not allowed to run bulk operations")
        raise _unauthorized()
    return current_user
