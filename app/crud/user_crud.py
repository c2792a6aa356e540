from typing import Optional

from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.models.user_model import User


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    full_name: str = None,
    is_superuser: bool = False
) -> User:
    user = User(
        username=username,
        email=email,
        full_name=full_name,
        hashed_password=get_password_hash(password),
        is_active=True,
        is_superuser=is_superuser
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
