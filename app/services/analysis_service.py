"""
Analysis invocation: validate, gate, consult the cache, call the provider, persist.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import AnalysisValidationError, PersistenceError
from app.db.models.analysis_record import AnalysisRecord
from app.schemas.analysis import ANALYSIS_TYPES, BASE_ANALYSIS_TYPE, AnalysisResult
from app.services.analysis_cache import fingerprint_pair, lookup_cached_analysis, store_analysis
from app.services.analysis_provider import AnalysisProvider
from app.services.tier_service import filter_allowed_features

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    result: AnalysisResult
    cached: bool
    saved: bool
    analysis_id: Optional[int] = None
    skipped_types: List[str] = field(default_factory=list)
    not_in_cached_result: List[str] = field(default_factory=list)


def validate_analysis_request(resume_text: str, job_description: str, requested_types: List[str]) -> None:
    """
    Reject incomplete submissions before anything else happens.

    Raises:
        AnalysisValidationError: Blank text or an unknown analysis type
    """
    if not (resume_text or "").strip():
        raise AnalysisValidationError("Please provide your resume text")
    if not (job_description or "").strip():
        raise AnalysisValidationError("Please provide the job description")
    unknown = [t for t in requested_types if t not in ANALYSIS_TYPES]
    if unknown:
        raise AnalysisValidationError(f"Unknown analysis type(s): {', '.join(unknown)}")


def analyze(
    db: Session,
    user_id: int,
    resume_text: str,
    job_description: str,
    requested_types: List[str],
    provider: AnalysisProvider,
) -> AnalysisOutcome:
    """
    Analyze a resume against a job description for one user.

    Identical resubmissions (byte-for-byte the same texts) are served from the
    cache without calling the provider. Premium types the user's tier does not
    include are removed before the provider call and reported back as skipped.

    Raises:
        AnalysisValidationError: Missing input or unknown type (no external call made)
        CacheLookupError: The cache could not be queried
        AnalysisProviderError: The provider failed; nothing was stored
    """
    requested_types = list(requested_types or [])
    validate_analysis_request(resume_text, job_description, requested_types)

    premium_requested = [t for t in requested_types if t != BASE_ANALYSIS_TYPE]
    allowed, skipped = filter_allowed_features(db, user_id, premium_requested)
    if skipped:
        logger.info(f"Analysis types filtered by tier: user_id={user_id}, skipped={skipped}")

    hashes = fingerprint_pair(resume_text, job_description)
    cached = lookup_cached_analysis(db, user_id, *hashes)
    if cached is not None:
        logger.info(f"Analysis cache hit: user_id={user_id}, analysis_id={cached.id}")
        result = AnalysisResult.model_validate(cached.analysis_details)
        # Stored verbatim: sections allowed now but not requested back then are absent
        missing = [t for t in allowed if getattr(result, t) is None]
        return AnalysisOutcome(
            result=result,
            cached=True,
            saved=True,
            analysis_id=cached.id,
            skipped_types=skipped,
            not_in_cached_result=missing,
        )

    logger.info(f"Analysis cache miss: user_id={user_id}, types={allowed}")
    result = provider.analyze(resume_text, job_description, allowed)

    try:
        record = store_analysis(db, user_id, resume_text, job_description, hashes, result, allowed)
    except PersistenceError:
        logger.error(f"Analysis result not saved, returning unsaved result: user_id={user_id}")
        return AnalysisOutcome(result=result, cached=False, saved=False, skipped_types=skipped)

    return AnalysisOutcome(
        result=result,
        cached=False,
        saved=True,
        analysis_id=record.id,
        skipped_types=skipped,
    )


def list_analyses(db: Session, user_id: int, page: int = 1, page_size: int = 20) -> Tuple[List[AnalysisRecord], int]:
    """Newest-first page of a user's analyses plus the total count."""
    query = db.query(AnalysisRecord).filter(AnalysisRecord.user_id == user_id)
    total = query.count()
    records = (
        query.order_by(AnalysisRecord.created_at.desc(), AnalysisRecord.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return records, total


def get_analysis(db: Session, user_id: int, analysis_id: int) -> Optional[AnalysisRecord]:
    """The analysis if it exists and belongs to the user, else None."""
    return (
        db.query(AnalysisRecord)
        .filter(AnalysisRecord.id == analysis_id, AnalysisRecord.user_id == user_id)
        .first()
    )
