from app.crud.user_crud import (
    get_user_by_username,
    create_user,
)

__all__ = [
    "get_user_by_username",
    "create_user",
]
