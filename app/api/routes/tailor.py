import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.core.exceptions import (
    AnalysisNotFoundError,
    AnalysisProviderError,
    FeatureAccessDenied,
    PersistenceError,
)
from app.core.gating import enforce_feature_access, paywall
from app.schemas.analysis import TailoredResumeResponse
from app.services.analysis_provider import AnalysisProvider, get_analysis_provider
from app.services.tailor_service import generate_tailored_resume, list_tailored_resumes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tailor", tags=["Resume Tailoring"])


@router.post("/{analysis_id}", response_model=TailoredResumeResponse)
def tailor(
    analysis_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    """Tailored resume and cover letter for one of the user's analyses (Pro and above)."""
    try:
        return generate_tailored_resume(db, current_user.id, analysis_id, provider)
    except FeatureAccessDenied as e:
        raise paywall(e.feature)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    except AnalysisProviderError as e:
        logger.error(f"Tailoring failed: user_id={current_user.id}, analysis_id={analysis_id}, error={e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Resume generation is temporarily unavailable. Please try again.",
        )
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tailored resume could not be saved. Please try again.",
        )


@router.get("", response_model=list[TailoredResumeResponse])
def list_tailored(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    enforce_feature_access(db, current_user, "tailored_resume")
    return list_tailored_resumes(db, current_user.id)
