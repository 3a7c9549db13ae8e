"""
Resume / job description analysis endpoints.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.core.exceptions import AnalysisProviderError, AnalysisValidationError, CacheLookupError
from app.core.tiers import required_tier, tier_allows
from app.schemas.analysis import (
    BASE_ANALYSIS_TYPE,
    PREMIUM_ANALYSIS_TYPES,
    AnalysisDetailResponse,
    AnalysisHistoryItem,
    AnalysisHistoryResponse,
    AnalysisResult,
    AnalysisTypeInfo,
    AnalyzeRequest,
    AnalyzeResponse,
)
from app.services import analysis_service
from app.services.analysis_provider import AnalysisProvider, get_analysis_provider
from app.services.tier_service import resolve_tier_rank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Analysis"])

PROVIDER_FAILURE_DETAIL = {
    "detail": "The analysis service is temporarily unavailable. Please try again.",
    "code": "PROVIDER_ERROR",
    "retryable": True,
}


@router.post("", response_model=AnalyzeResponse)
def analyze(
    payload: AnalyzeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    """
    Analyze a resume against a job description.

    Identical resubmissions are answered from the cache (`cached=true`).
    Premium analysis types outside the user's tier are skipped and listed in
    `skipped_analysis_types`. Allowed types absent from a cached result are
    listed in `not_in_cached_result`.
    """
    try:
        outcome = analysis_service.analyze(
            db,
            current_user.id,
            payload.resume_text,
            payload.job_description,
            payload.analysis_types,
            provider,
        )
    except AnalysisValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CacheLookupError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis history is temporarily unavailable. Please try again.",
        )
    except AnalysisProviderError as e:
        logger.error(f"Analysis failed: user_id={current_user.id}, error={e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=PROVIDER_FAILURE_DETAIL)

    return AnalyzeResponse(
        analysis_id=outcome.analysis_id,
        cached=outcome.cached,
        saved=outcome.saved,
        skipped_analysis_types=outcome.skipped_types,
        not_in_cached_result=outcome.not_in_cached_result,
        result=outcome.result,
    )


@router.get("/types", response_model=list[AnalysisTypeInfo])
def list_analysis_types(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Every analysis type with the tier that unlocks it and whether the user has it."""
    rank = resolve_tier_rank(db, current_user.id)
    types = {BASE_ANALYSIS_TYPE: "Job Match Analysis", **PREMIUM_ANALYSIS_TYPES}
    return [
        AnalysisTypeInfo(
            id=type_id,
            name=name,
            required_tier=required_tier(type_id),
            allowed=tier_allows(rank, type_id),
        )
        for type_id, name in types.items()
    ]


@router.get("/history", response_model=AnalysisHistoryResponse)
def get_history(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    records, total = analysis_service.list_analyses(db, current_user.id, page, page_size)
    entries = [
        AnalysisHistoryItem(
            id=record.id,
            compatibility_score=record.compatibility_score,
            keyword_matches=record.keyword_matches or [],
            experience_gaps=record.experience_gaps or [],
            has_tailored_resume=bool(record.tailored),
            created_at=record.created_at,
        )
        for record in records
    ]
    return AnalysisHistoryResponse(entries=entries, total=total, page=page, page_size=page_size)


@router.get("/{analysis_id}", response_model=AnalysisDetailResponse)
def get_analysis(
    analysis_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = analysis_service.get_analysis(db, current_user.id, analysis_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return AnalysisDetailResponse(
        id=record.id,
        created_at=record.created_at,
        analysis_types=record.analysis_types or [],
        original_resume_text=record.original_resume_text,
        original_job_description=record.original_job_description,
        result=AnalysisResult.model_validate(record.analysis_details),
    )
