"""
Create an administrator account, or promote an existing user to admin.
Run: python -m scripts.setup_admin_user admin@example.com --password 'S3curePass!'
"""
import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.db.session import SessionLocal
from app.db.models.user import User
from app.core.security import hash_password
from app.core.tiers import Tier

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def setup_admin_user(email: str, password: Optional[str] = None, name: Optional[str] = None) -> bool:
    """Give `email` the admin role, creating the account when a password is supplied."""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()

        if not user:
            if not password:
                logger.error(f"User {email} not found and no password provided. Cannot create user.")
                return False
            user = User(
                email=email.lower(),
                name=name or "Administrator",
                password_hash=hash_password(password),
                role=Tier.ADMIN.value,
            )
            db.add(user)
            logger.info(f"Creating admin user: {email}")
        else:
            logger.info(f"Promoting existing user to admin: {email} (ID: {user.id}, role: {user.role})")
            user.role = Tier.ADMIN.value

        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error setting up admin user: {e}", exc_info=True)
        return False
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("--password", help="Required when the account does not exist yet")
    parser.add_argument("--name")
    args = parser.parse_args(argv)

    if not setup_admin_user(args.email, args.password, args.name):
        print(f"\n[ERROR] Failed to set up admin user {args.email}")
        return 1
    print(f"\n[SUCCESS] {args.email} is now an administrator")
    return 0


if __name__ == "__main__":
    sys.exit(main())
