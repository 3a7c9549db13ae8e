"""
Model router for selecting a model per analysis request.
"""
import logging
from typing import Iterable

from app.core.config import OPENAI_MODEL, OPENAI_PREMIUM_MODEL

logger = logging.getLogger(__name__)

# Operation -> model. Premium sub-reports need longer, more careful output.
MODEL_ROUTING = {
    "job_match_analysis": OPENAI_MODEL,
    "premium_analysis": OPENAI_PREMIUM_MODEL,
    "tailored_resume": OPENAI_PREMIUM_MODEL,
}


def get_model_for_analysis(analysis_types: Iterable[str]) -> str:
    """
    Pick the model for an analysis call.

    Args:
        analysis_types: Premium analysis type ids that survived tier filtering

    Returns:
        Model identifier string
    """
    if any(analysis_types):
        return MODEL_ROUTING["premium_analysis"]
    return MODEL_ROUTING["job_match_analysis"]


def get_model_for_tailoring() -> str:
    return MODEL_ROUTING["tailored_resume"]
