"""
Tier resolution and feature access checks.

Resolution reads the database on every call; a downgrade (expired or cancelled
subscription, demoted role) is visible on the very next call.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.tiers import Tier, TIER_RANKS, normalize_tier_name, rank_for_tier, tier_allows
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.db.models.subscription_plan import SubscriptionPlan

logger = logging.getLogger(__name__)


def get_active_plan(db: Session, user_id: int, now: Optional[datetime] = None) -> Optional[SubscriptionPlan]:
    """Highest-ranked plan among the user's active, unexpired subscriptions."""
    now = now or datetime.utcnow()
    return (
        db.query(SubscriptionPlan)
        .join(Subscription, Subscription.plan_id == SubscriptionPlan.id)
        .filter(
            Subscription.user_id == user_id,
            Subscription.status == "active",
            or_(Subscription.end_date.is_(None), Subscription.end_date > now),
        )
        .order_by(SubscriptionPlan.tier_level.desc())
        .first()
    )


def _user_role(db: Session, user_id: int) -> Optional[str]:
    row = db.query(User.role).filter(User.id == user_id).first()
    return row[0] if row else None


def resolve_tier(db: Session, user_id: int, now: Optional[datetime] = None) -> str:
    """
    Effective tier name for a user.

    Active subscription (highest plan rank) first, then the user's role,
    then "free".
    """
    plan = get_active_plan(db, user_id, now)
    if plan is not None:
        return normalize_tier_name(plan.name)
    return normalize_tier_name(_user_role(db, user_id))


def resolve_tier_rank(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
    """
    Effective numeric rank for a user.

    Administrators outrank every plan regardless of subscriptions. The rank
    overrides, the name does not: resolve_tier still reports an admin's active
    plan first, so an admin on Pro reads as tier "pro" with rank 999.
    """
    role = _user_role(db, user_id)
    if normalize_tier_name(role) == Tier.ADMIN.value:
        return TIER_RANKS[Tier.ADMIN]

    plan = get_active_plan(db, user_id, now)
    if plan is not None:
        return plan.tier_level
    return rank_for_tier(role)


def has_feature_access(db: Session, user_id: int, feature: str, now: Optional[datetime] = None) -> bool:
    """Whether the user's current tier unlocks `feature`."""
    allowed = tier_allows(resolve_tier_rank(db, user_id, now), feature)
    logger.debug(f"Feature check: user_id={user_id}, feature={feature}, allowed={allowed}")
    return allowed


def filter_allowed_features(
    db: Session,
    user_id: int,
    requested: Iterable[str],
    now: Optional[datetime] = None,
) -> Tuple[List[str], List[str]]:
    """
    Split requested features into (allowed, denied).

    Order of first occurrence is preserved and duplicates are dropped. The rank
    is resolved once per call.
    """
    rank = resolve_tier_rank(db, user_id, now)
    allowed: List[str] = []
    denied: List[str] = []
    seen = set()
    for feature in requested:
        if feature in seen:
            continue
        seen.add(feature)
        (allowed if tier_allows(rank, feature) else denied).append(feature)
    return allowed, denied
