"""
Tailored resume generation from a stored analysis (Pro and above).
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AnalysisNotFoundError, FeatureAccessDenied, PersistenceError
from app.db.models.tailored_resume import TailoredResume
from app.schemas.analysis import AnalysisResult
from app.services.analysis_provider import AnalysisProvider
from app.services.analysis_service import get_analysis
from app.services.tier_service import has_feature_access

logger = logging.getLogger(__name__)

TAILOR_FEATURE = "tailored_resume"


def get_tailored_resume(db: Session, analysis_id: int) -> Optional[TailoredResume]:
    return db.query(TailoredResume).filter(TailoredResume.analysis_id == analysis_id).first()


def generate_tailored_resume(
    db: Session,
    user_id: int,
    analysis_id: int,
    provider: AnalysisProvider,
) -> TailoredResume:
    """
    Return the tailored resume for an analysis, generating it on first request.

    A second request for the same analysis returns the stored row without a
    provider call.

    Raises:
        FeatureAccessDenied: The user's tier does not include tailored resumes
        AnalysisNotFoundError: No such analysis for this user
        AnalysisProviderError: Generation failed; nothing stored
        PersistenceError: The generated resume could not be saved
    """
    if not has_feature_access(db, user_id, TAILOR_FEATURE):
        raise FeatureAccessDenied(TAILOR_FEATURE)

    record = get_analysis(db, user_id, analysis_id)
    if record is None:
        raise AnalysisNotFoundError(f"Analysis {analysis_id} not found")

    existing = get_tailored_resume(db, record.id)
    if existing is not None:
        logger.info(f"Tailored resume already exists: analysis_id={record.id}")
        return existing

    analysis = AnalysisResult.model_validate(record.analysis_details)
    generated = provider.tailor(record.original_resume_text, record.original_job_description, analysis)

    tailored = TailoredResume(
        user_id=user_id,
        analysis_id=record.id,
        tailored_resume=generated.tailored_resume,
        improvements=generated.improvements,
        cover_letter=generated.cover_letter,
        cover_letter_key_points=generated.cover_letter_key_points,
    )
    try:
        db.add(tailored)
        db.commit()
        db.refresh(tailored)
    except SQLAlchemyError as e:
        db.rollback()
        # Lost a race with an identical request
        existing = get_tailored_resume(db, record.id)
        if existing is not None:
            return existing
        logger.error(f"Failed to store tailored resume: analysis_id={record.id}", exc_info=True)
        raise PersistenceError("Tailored resume could not be saved") from e

    logger.info(f"Tailored resume generated: user_id={user_id}, analysis_id={record.id}")
    return tailored


def list_tailored_resumes(db: Session, user_id: int) -> List[TailoredResume]:
    return (
        db.query(TailoredResume)
        .filter(TailoredResume.user_id == user_id)
        .order_by(TailoredResume.created_at.desc(), TailoredResume.id.desc())
        .all()
    )
