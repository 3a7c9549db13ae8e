"""
Feature gating for route handlers.

Access decisions come from the tier service; this module only turns a denial
into the structured 402 paywall response the frontend renders.
"""
import logging
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import FRONTEND_URL
from app.core.tiers import required_tier
from app.db.models.user import User
from app.services.tier_service import has_feature_access, resolve_tier

logger = logging.getLogger(__name__)


def paywall_detail(feature: str) -> Dict[str, Any]:
    tier = required_tier(feature)
    return {
        "detail": f"This feature requires the {tier.title()} plan. Upgrade to unlock.",
        "code": "PAYWALL",
        "feature": feature,
        "required_tier": tier,
        "upgrade_url": f"{FRONTEND_URL}/pricing",
    }


def paywall(feature: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=paywall_detail(feature))


def enforce_feature_access(db: Session, user: User, feature: str) -> None:
    """
    Enforce feature access based on the user's current tier.

    Raises HTTPException with 402 status and structured payload if the user
    doesn't have access.
    """
    if has_feature_access(db, user.id, feature):
        return

    logger.warning(
        f"Feature access denied: user_id={user.id}, tier={resolve_tier(db, user.id)}, feature={feature}"
    )
    raise paywall(feature)
