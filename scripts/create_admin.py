"""
Script to create the admin user allowed to run bulk operations.

Usage:
    python scripts/create_admin.py [username] [password] [email]
"""
import os
import sys

from sqlalchemy.exc import SQLAlchemyError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.crud import create_user, get_user_by_username  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402


def create_admin_user(username: str, password: str, email: str):
    db = SessionLocal()
    try:
        existing_user = get_user_by_username(db, username)
        if existing_user:
            print("✅ Admin user already exists!")
            print(f"   Username: {existing_user.username}")
            print(f"   Superuser: {existing_user.is_superuser}")
            return

        admin = create_user(
            db,
            username=username,
            email=email,
            password=password,
            full_name="Administrator",
            is_superuser=True,
        )

        print("✅ Admin user created successfully!")
        print(f"   Username: {admin.username}")
        print(f"   Email: {admin.email}")
        print(f"   ID: {admin.id}")

    except SQLAlchemyError as e:
        print(f"❌ Error creating admin user: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    args = sys.argv[1:]
    create_admin_user(
        username=args[0] if len(args) > 0 else os.getenv("ADMIN_USERNAME", "admin"),
        password=args[1] if len(args) > 1 else os.getenv("ADMIN_PASSWORD", "admin123"),
        email=args[2] if len(args) > 2 else os.getenv("ADMIN_EMAIL", "admin@example.com"),
    )
