"""
Content-addressed analysis cache.

A (resume, job description) pair is identified by the SHA-256 digests of the
two raw texts. Digests are case and whitespace sensitive: any edit to either
text is a different submission.
"""
import hashlib
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import CacheLookupError, PersistenceError
from app.db.models.analysis_record import AnalysisRecord
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)


def fingerprint(text: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 encoded text (64 chars)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def fingerprint_pair(resume_text: str, job_description: str) -> Tuple[str, str]:
    return fingerprint(resume_text), fingerprint(job_description)


def lookup_cached_analysis(
    db: Session,
    user_id: int,
    resume_hash: str,
    job_description_hash: str,
) -> Optional[AnalysisRecord]:
    """
    Find the stored analysis for this exact submission.

    Returns None on a miss. A failing query raises CacheLookupError so callers
    can tell an outage apart from a miss.
    """
    try:
        return (
            db.query(AnalysisRecord)
            .filter(
                AnalysisRecord.user_id == user_id,
                AnalysisRecord.resume_hash == resume_hash,
                AnalysisRecord.job_description_hash == job_description_hash,
            )
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Cache lookup failed: user_id={user_id}, error={type(e).__name__}", exc_info=True)
        raise CacheLookupError("Analysis cache is unavailable") from e


def store_analysis(
    db: Session,
    user_id: int,
    resume_text: str,
    job_description: str,
    hashes: Tuple[str, str],
    result: AnalysisResult,
    analysis_types: Optional[list] = None,
) -> AnalysisRecord:
    """
    Insert a new cache row for a completed analysis.

    When a concurrent identical request already stored its row, the unique
    fingerprint constraint rejects this insert and the existing row is returned.

    Raises:
        PersistenceError: The insert failed for any other reason
    """
    resume_hash, job_description_hash = hashes
    record = AnalysisRecord(
        user_id=user_id,
        resume_hash=resume_hash,
        job_description_hash=job_description_hash,
        compatibility_score=result.numeric_score(),
        keyword_matches=result.present_keywords(),
        skill_gaps=result.missing_keywords(),
        experience_gaps=list(result.gaps_and_suggestions),
        analysis_details=result.model_dump(mode="json", exclude_none=True),
        analysis_types=list(analysis_types or []),
        original_resume_text=resume_text,
        original_job_description=job_description,
    )
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except IntegrityError:
        db.rollback()
        try:
            existing = lookup_cached_analysis(db, user_id, resume_hash, job_description_hash)
        except CacheLookupError as e:
            raise PersistenceError("Analysis could not be saved") from e
        if existing is None:
            raise PersistenceError("Analysis could not be saved")
        logger.info(f"Concurrent analysis already cached: user_id={user_id}, analysis_id={existing.id}")
        return existing
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store analysis: user_id={user_id}, error={type(e).__name__}", exc_info=True)
        raise PersistenceError("Analysis could not be saved") from e

    logger.info(f"Analysis cached: user_id={user_id}, analysis_id={record.id}, score={record.compatibility_score}")
    return record
