"""
Profile and tier endpoints for the authenticated user.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.core.tiers import required_tier
from app.schemas.auth import FeatureAccessResponse, ProfileResponse, ProfileUpdateRequest, TierResponse
from app.services.tier_service import has_feature_access, resolve_tier, resolve_tier_rank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/me", tags=["Me"])


@router.get("", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update editable profile fields. Omitted fields are left unchanged."""
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    logger.info(f"Profile updated: user_id={current_user.id}, fields={sorted(changes)}")
    return current_user


@router.get("/tier", response_model=TierResponse)
def get_tier(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return TierResponse(
        tier=resolve_tier(db, current_user.id),
        rank=resolve_tier_rank(db, current_user.id),
    )


@router.get("/features/{feature}", response_model=FeatureAccessResponse)
def get_feature_access(
    feature: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return FeatureAccessResponse(
        feature=feature,
        allowed=has_feature_access(db, current_user.id, feature),
        required_tier=required_tier(feature),
    )
