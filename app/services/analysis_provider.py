"""
Analysis provider: turns resume / job description text into a structured report.

Builds the prompt, calls the configured LLM, extracts the JSON payload and
validates it. Every provider-side failure (timeout, API error, unparsable or
schema-invalid output) surfaces as AnalysisProviderError so callers have one
retryable failure to handle.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.core.exceptions import AnalysisProviderError
from app.llm.provider import LLMProvider
from app.llm.router import get_model_for_analysis, get_model_for_tailoring
from app.schemas.analysis import (
    PREMIUM_ANALYSIS_TYPES,
    AnalysisResult,
    TailoredResumeResult,
)

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_BARE_JSON = re.compile(r"\{.*\}", re.DOTALL)

SYSTEM_PROMPT = (
    "You are an expert technical recruiter and resume coach. "
    "Compare a candidate's resume with a job description and answer with a single JSON object only."
)

BASE_INSTRUCTIONS = """Return a JSON object with these keys:
- "match_summary": two or three sentences on how well the resume fits the role
- "match_score": the overall fit as a string "N/100"
- "job_keywords_detected": list of {{"keyword": str, "status": "Present" | "Missing"}} for the important job keywords
- "gaps_and_suggestions": list of concrete gaps with a suggestion for each
{sections}
RESUME:
{resume}

JOB DESCRIPTION:
{job_description}
"""

SECTION_INSTRUCTIONS = {
    "ats_compatibility": "how well automated tracking systems will parse the resume (structure, headings, keywords)",
    "impact_statement_review": "weak or unquantified achievement statements, listed under \"issues\"",
    "skills_gap_assessment": "skills the job requires that the resume does not show, listed under \"issues\"",
    "format_optimization": "layout, length and readability problems",
    "career_story_flow": "whether the career progression reads as a coherent story toward this role",
}

TAILOR_INSTRUCTIONS = """Rewrite the resume for the job below. Keep every fact truthful; only reorder,
rephrase and emphasise what is already there. Use the analysis to close the gaps it found.

Return a JSON object with these keys:
- "tailored_resume": the full rewritten resume as plain text
- "improvements": list of the changes you made
- "cover_letter": a short cover letter for this job
- "cover_letter_key_points": list of the points the cover letter stresses

ANALYSIS:
{analysis}

RESUME:
{resume}

JOB DESCRIPTION:
{job_description}
"""


def _section_prompt(analysis_types: List[str]) -> str:
    if not analysis_types:
        return ""
    lines = ["Also include one key per additional report, each an object "
             "{\"score\": 0-10, \"summary\": str, \"issues\": [str], \"suggestions\": [str]}:"]
    for analysis_type in analysis_types:
        lines.append(f'- "{analysis_type}": {SECTION_INSTRUCTIONS[analysis_type]}')
    return "\n".join(lines) + "\n"


def parse_json_payload(text: str) -> Dict[str, Any]:
    """
    Extract a JSON object from model output.

    Accepts a bare object, an object inside a ```json fenced block, or an object
    surrounded by prose.

    Raises:
        AnalysisProviderError: No JSON object could be decoded
    """
    candidates = []
    fenced = _FENCED_JSON.search(text or "")
    if fenced:
        candidates.append(fenced.group(1))
    candidates.append(text or "")
    bare = _BARE_JSON.search(text or "")
    if bare:
        candidates.append(bare.group(0))

    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(payload, dict):
            return payload

    logger.warning(f"Unparsable analysis output: {(text or '')[:200]!r}")
    raise AnalysisProviderError("Analysis provider returned malformed output")


class AnalysisProvider:
    """Wraps an LLMProvider with the analysis prompts and output validation."""

    def __init__(self, llm: Optional[LLMProvider] = None):
        self._llm = llm

    @property
    def llm(self) -> LLMProvider:
        if self._llm is None:
            from app.llm.openai_provider import OpenAIProvider
            try:
                self._llm = OpenAIProvider()
            except ValueError as e:
                raise AnalysisProviderError("Analysis provider is not configured") from e
        return self._llm

    def _complete(self, prompt: str, model: str) -> Dict[str, Any]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        try:
            response = self.llm.chat(messages=messages, model=model, json_mode=True)
        except (TimeoutError, RuntimeError) as e:
            raise AnalysisProviderError(str(e)) from e
        logger.info(
            f"Provider call completed: model={response.model}, "
            f"tokens={response.total_tokens}, cost=${response.cost_estimate:.4f}"
        )
        return parse_json_payload(response.content)

    def analyze(self, resume_text: str, job_description: str, analysis_types: List[str]) -> AnalysisResult:
        """
        Run the base report plus the given premium sections.

        `analysis_types` must already be filtered to what the user may access;
        any premium section the model returns beyond it is dropped.
        """
        requested = [t for t in analysis_types if t in PREMIUM_ANALYSIS_TYPES]
        prompt = BASE_INSTRUCTIONS.format(
            sections=_section_prompt(requested),
            resume=resume_text,
            job_description=job_description,
        )
        payload = self._complete(prompt, get_model_for_analysis(requested))
        try:
            result = AnalysisResult.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Analysis output failed validation: errors={e.error_count()}")
            raise AnalysisProviderError("Analysis provider returned an invalid report") from e
        return result.without_sections(requested)

    def tailor(self, resume_text: str, job_description: str, analysis: AnalysisResult) -> TailoredResumeResult:
        """Generate a tailored resume and cover letter from a finished analysis."""
        prompt = TAILOR_INSTRUCTIONS.format(
            analysis=analysis.model_dump_json(exclude_none=True),
            resume=resume_text,
            job_description=job_description,
        )
        payload = self._complete(prompt, get_model_for_tailoring())
        try:
            return TailoredResumeResult.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Tailoring output failed validation: errors={e.error_count()}")
            raise AnalysisProviderError("Analysis provider returned an invalid tailored resume") from e


def get_analysis_provider() -> AnalysisProvider:
    """FastAPI dependency; tests override it with a fake-backed provider."""
    return AnalysisProvider()
