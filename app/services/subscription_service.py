"""
Subscription lifecycle: plans, activation, cancellation and the expiry sweep.

The user's `role` mirrors the highest plan they hold an active, unexpired
subscription for. Administrators keep their role through every transition.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import SUBSCRIPTION_PERIOD_DAYS
from app.core.tiers import Tier, normalize_tier_name
from app.db.models.subscription import Subscription
from app.db.models.subscription_plan import SubscriptionPlan
from app.db.models.user import User
from app.services.tier_service import get_active_plan

logger = logging.getLogger(__name__)


def list_plans(db: Session, include_inactive: bool = False) -> List[SubscriptionPlan]:
    query = db.query(SubscriptionPlan)
    if not include_inactive:
        query = query.filter(SubscriptionPlan.is_active.is_(True))
    return query.order_by(SubscriptionPlan.tier_level).all()


def get_active_subscription(db: Session, user_id: int, now: Optional[datetime] = None) -> Optional[Subscription]:
    """Highest-tier active subscription that has not reached its end date."""
    now = now or datetime.utcnow()
    return (
        db.query(Subscription)
        .join(SubscriptionPlan, Subscription.plan_id == SubscriptionPlan.id)
        .filter(
            Subscription.user_id == user_id,
            Subscription.status == "active",
            or_(Subscription.end_date.is_(None), Subscription.end_date > now),
        )
        .order_by(SubscriptionPlan.tier_level.desc())
        .first()
    )


def list_subscriptions(db: Session, user_id: int) -> List[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.user_id == user_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )


def sync_user_role(db: Session, user: User, now: Optional[datetime] = None) -> str:
    """
    Set the user's role from their current subscriptions. Does not commit.

    Returns the resulting role.
    """
    if normalize_tier_name(user.role) == Tier.ADMIN.value:
        return user.role

    db.flush()
    plan = get_active_plan(db, user.id, now)
    role = normalize_tier_name(plan.name) if plan is not None else Tier.FREE.value
    if user.role != role:
        logger.info(f"User role changed: user_id={user.id}, from={user.role}, to={role}")
        user.role = role
    return role


def activate_subscription(db: Session, subscription: Subscription, now: Optional[datetime] = None) -> Subscription:
    """
    Start the subscription period and promote the owner. Does not commit.

    The period runs from `now` for the plan's duration, or
    SUBSCRIPTION_PERIOD_DAYS when the plan does not set one.
    """
    now = now or datetime.utcnow()
    days = subscription.plan.duration_days or SUBSCRIPTION_PERIOD_DAYS
    subscription.status = "active"
    subscription.start_date = now
    subscription.end_date = now + timedelta(days=days)

    user = db.query(User).filter(User.id == subscription.user_id).first()
    if user is not None:
        sync_user_role(db, user, now)

    logger.info(
        f"Subscription activated: subscription_id={subscription.id}, user_id={subscription.user_id}, "
        f"plan={subscription.plan.name}, end_date={subscription.end_date.isoformat()}"
    )
    return subscription


def cancel_subscription(db: Session, user_id: int, subscription_id: int) -> Optional[Subscription]:
    """
    Cancel one of the user's active subscriptions immediately.

    Returns None when the subscription does not exist or belongs to someone else.

    Raises:
        ValueError: The subscription is not active
    """
    subscription = (
        db.query(Subscription)
        .filter(Subscription.id == subscription_id, Subscription.user_id == user_id)
        .first()
    )
    if subscription is None:
        return None
    if subscription.status != "active":
        raise ValueError(f"Only active subscriptions can be cancelled (status={subscription.status})")

    subscription.status = "cancelled"
    subscription.auto_renew = False
    user = db.query(User).filter(User.id == user_id).first()
    if user is not None:
        sync_user_role(db, user)
    db.commit()
    db.refresh(subscription)

    logger.info(f"Subscription cancelled: subscription_id={subscription_id}, user_id={user_id}")
    return subscription


def cleanup_expired_subscriptions(db: Session, now: Optional[datetime] = None) -> int:
    """
    Expire every active subscription whose end date has passed.

    Each affected user falls back to their next covering subscription, or to
    the free tier when none remains. Returns the number of subscriptions expired.
    """
    now = now or datetime.utcnow()
    expired = (
        db.query(Subscription)
        .filter(
            Subscription.status == "active",
            Subscription.end_date.isnot(None),
            Subscription.end_date < now,
        )
        .all()
    )
    if not expired:
        logger.info("Subscription cleanup: nothing to expire")
        return 0

    user_ids = set()
    for subscription in expired:
        subscription.status = "expired"
        user_ids.add(subscription.user_id)

    for user in db.query(User).filter(User.id.in_(user_ids)).all():
        sync_user_role(db, user, now)

    db.commit()
    logger.info(f"Subscription cleanup: expired={len(expired)}, users={len(user_ids)}")
    return len(expired)
