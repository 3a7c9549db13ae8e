from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.schemas.chat import CitationListResponse, CitationResponse
from app.services.chat_service import search_citations

router = APIRouter(prefix="/citations", tags=["Citations"])


@router.get("", response_model=CitationListResponse)
def search(
    q: str = Query(..., min_length=2, description="Case name or citation text"),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    results = search_citations(db, q, limit)
    return CitationListResponse(results=[CitationResponse.model_validate(c) for c in results])
