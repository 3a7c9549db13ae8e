import logging
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.session import get_db
from app.db.models.user import User

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# last_active is refreshed at most this often per user
LAST_ACTIVE_RESOLUTION = timedelta(minutes=5)


def get_current_email(token: str = Depends(oauth2_scheme)) -> str:
    """Get current user email from JWT token."""
    email = decode_access_token(token)
    if email is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return email


def touch_last_active(db: Session, user: User) -> None:
    now = datetime.utcnow()
    updated = (
        db.query(User)
        .filter(
            User.id == user.id,
            or_(User.last_active.is_(None), User.last_active < now - LAST_ACTIVE_RESOLUTION),
        )
        .update({User.last_active: now}, synchronize_session=False)
    )
    if updated:
        db.commit()
        db.refresh(user)


def get_current_user(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
) -> User:
    """Current User row for the bearer token."""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    touch_last_active(db, user)
    return user
