"""
Pydantic schemas for resume / job description analysis.
"""
import math
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Base report, always produced and available on every tier
BASE_ANALYSIS_TYPE = "job_match_analysis"

# Optional premium sub-reports
PREMIUM_ANALYSIS_TYPES: Dict[str, str] = {
    "ats_compatibility": "ATS Compatibility",
    "impact_statement_review": "Impact Statement Review",
    "skills_gap_assessment": "Skills Gap Assessment",
    "format_optimization": "Format Optimization",
    "career_story_flow": "Career Story Flow",
}

ANALYSIS_TYPES: List[str] = [BASE_ANALYSIS_TYPE, *PREMIUM_ANALYSIS_TYPES]

_SCORE_PATTERN = re.compile(r"(\d+)")


class KeywordStatus(str, Enum):
    PRESENT = "Present"
    MISSING = "Missing"


class JobKeyword(BaseModel):
    keyword: str
    status: KeywordStatus


class PremiumReport(BaseModel):
    """Per-type premium sub-report scored 0-10."""
    score: float = Field(..., ge=0, le=10, description="Section score 0-10")
    summary: str = Field(default="")
    issues: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("issues", "weak_statements", "missing_skills"),
    )
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> Any:
        # Anything that is not a number or numeric string is left for the float check to reject
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            return v
        return max(0.0, min(10.0, float(v)))


class AnalysisResult(BaseModel):
    """Structured analysis returned by the provider and stored in the cache."""
    match_summary: str
    match_score: str = Field(..., description='Score string such as "72/100"')
    job_keywords_detected: List[JobKeyword] = Field(default_factory=list)
    gaps_and_suggestions: List[str] = Field(default_factory=list)

    ats_compatibility: Optional[PremiumReport] = None
    impact_statement_review: Optional[PremiumReport] = None
    skills_gap_assessment: Optional[PremiumReport] = None
    format_optimization: Optional[PremiumReport] = None
    career_story_flow: Optional[PremiumReport] = None

    @field_validator("match_score", mode="before")
    @classmethod
    def coerce_match_score(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v):
            return f"{int(v)}/100"
        return v

    def numeric_score(self) -> int:
        """Numeric portion of match_score, clamped to 0-100 (0 when absent)."""
        match = _SCORE_PATTERN.search(self.match_score or "")
        if not match:
            return 0
        return max(0, min(100, int(match.group(1))))

    def present_keywords(self) -> List[str]:
        return [k.keyword for k in self.job_keywords_detected if k.status == KeywordStatus.PRESENT]

    def missing_keywords(self) -> List[str]:
        return [k.keyword for k in self.job_keywords_detected if k.status == KeywordStatus.MISSING]

    def without_sections(self, allowed: List[str]) -> "AnalysisResult":
        """Copy with every premium section not in `allowed` removed."""
        dropped = {name: None for name in PREMIUM_ANALYSIS_TYPES if name not in allowed}
        return self.model_copy(update=dropped)


class TailoredResumeResult(BaseModel):
    tailored_resume: str
    improvements: List[str] = Field(default_factory=list)
    cover_letter: Optional[str] = None
    cover_letter_key_points: List[str] = Field(default_factory=list)


# ============================================
# Request / Response Models
# ============================================

class AnalyzeRequest(BaseModel):
    resume_text: str = Field(default="", description="Plain text of the resume")
    job_description: str = Field(default="", description="Plain text of the job description")
    analysis_types: List[str] = Field(default_factory=list, description="Requested premium analysis type ids")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "resume_text": "Senior Python developer with 6 years of FastAPI...",
            "job_description": "We are hiring a backend engineer...",
            "analysis_types": ["ats_compatibility", "skills_gap_assessment"],
        }
    })


class AnalyzeResponse(BaseModel):
    analysis_id: Optional[int] = Field(None, description="Stored record id (None when saving failed)")
    cached: bool = Field(..., description="True when served from a prior identical request")
    saved: bool = Field(..., description="False when the result could not be persisted")
    skipped_analysis_types: List[str] = Field(default_factory=list, description="Requested types the current tier does not include")
    not_in_cached_result: List[str] = Field(
        default_factory=list,
        description="Allowed types missing from a cached result; resubmit changed text to generate them",
    )
    result: AnalysisResult


class AnalysisTypeInfo(BaseModel):
    id: str
    name: str
    required_tier: str
    allowed: bool


class AnalysisHistoryItem(BaseModel):
    id: int
    compatibility_score: int
    keyword_matches: List[str]
    experience_gaps: List[str]
    has_tailored_resume: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnalysisHistoryResponse(BaseModel):
    entries: List[AnalysisHistoryItem]
    total: int
    page: int = 1
    page_size: int = 20


class AnalysisDetailResponse(BaseModel):
    id: int
    created_at: datetime
    analysis_types: List[str]
    original_resume_text: str
    original_job_description: str
    result: AnalysisResult


class TailoredResumeResponse(BaseModel):
    id: int
    analysis_id: int
    tailored_resume: str
    improvements: List[str]
    cover_letter: Optional[str] = None
    cover_letter_key_points: List[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
