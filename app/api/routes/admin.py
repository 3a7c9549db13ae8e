"""
Admin endpoints. Every route requires the admin role.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.subscription import Subscription
from app.db.models.user import User
from app.core.ownership import require_admin
from app.schemas.admin import (
    AdminSubscriptionListResponse,
    AdminSubscriptionResponse,
    AdminUserListResponse,
    AdminUserResponse,
    RoleUpdateRequest,
)
from app.schemas.billing import CleanupResponse
from app.services.subscription_service import cleanup_expired_subscriptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=AdminUserListResponse)
def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users = db.query(User).order_by(User.id).offset(offset).limit(limit).all()
    return AdminUserListResponse(
        users=[AdminUserResponse.model_validate(u) for u in users],
        limit=limit,
        offset=offset,
    )


@router.get("/subscriptions", response_model=AdminSubscriptionListResponse)
def list_subscriptions(
    status_filter: str = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Subscription)
    if status_filter:
        query = query.filter(Subscription.status == status_filter)
    subscriptions = query.order_by(Subscription.id.desc()).offset(offset).limit(limit).all()

    items = []
    for subscription in subscriptions:
        item = AdminSubscriptionResponse.model_validate(subscription)
        item.plan_name = subscription.plan.name if subscription.plan else None
        items.append(item)
    return AdminSubscriptionListResponse(subscriptions=items, limit=limit, offset=offset)


@router.put("/users/{user_id}/role", response_model=AdminUserResponse)
def set_role(
    user_id: int,
    payload: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    previous = user.role
    user.role = payload.role
    db.commit()
    db.refresh(user)
    logger.info(f"Role set by admin: admin_id={admin.id}, user_id={user_id}, from={previous}, to={user.role}")
    return user


@router.post("/subscriptions/cleanup", response_model=CleanupResponse)
def run_cleanup(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Expire lapsed subscriptions now instead of waiting for the scheduled sweep."""
    return CleanupResponse(expired=cleanup_expired_subscriptions(db))
