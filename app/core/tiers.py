"""
Subscription tiers and the feature access table.

Single source of truth for which tier unlocks which feature.
Features missing from FEATURE_REQUIREMENTS are available to everyone.
"""
from enum import Enum
from typing import Dict, Optional


class Tier(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"
    ADMIN = "admin"


TIER_RANKS: Dict[Tier, int] = {
    Tier.FREE: 0,
    Tier.PRO: 1,
    Tier.ENTERPRISE: 2,
    Tier.ADMIN: 999,  # Above every plan
}

# Minimum tier rank per feature
FEATURE_REQUIREMENTS: Dict[str, int] = {
    # Pro
    "internet_search": 1,
    "citation_generator": 1,
    "case_summarizer": 1,
    "case_brief_generator": 1,
    "compare_cases": 1,
    "statute_navigator": 1,
    "export_collaboration": 1,
    "ats_compatibility": 1,
    "impact_statement_review": 1,
    "skills_gap_assessment": 1,
    "format_optimization": 1,
    "career_story_flow": 1,
    "tailored_resume": 1,
    "cover_letter": 1,
    # Enterprise
    "precedent_finder": 2,
    "statute_evolution": 2,
    "team_collaboration": 2,
    "ai_drafting": 2,
    "offline_mode": 2,
    "voice_to_law": 2,
    "firm_analytics": 2,
    "white_label": 2,
}


def normalize_tier_name(name: Optional[str]) -> str:
    """
    Normalize a plan name or role to a tier name.

    Plan rows are named "Free" / "Pro" / "Enterprise"; user roles are lower-case.
    Unknown or empty values resolve to "free".
    """
    if not name:
        return Tier.FREE.value
    candidate = name.strip().lower()
    if candidate in {tier.value for tier in Tier}:
        return candidate
    return Tier.FREE.value


def rank_for_tier(name: Optional[str]) -> int:
    """Numeric rank for a tier name (unknown names rank as free)."""
    return TIER_RANKS[Tier(normalize_tier_name(name))]


def tier_for_rank(rank: int) -> str:
    """Highest tier name whose rank does not exceed `rank`."""
    best = Tier.FREE
    for tier, tier_rank in TIER_RANKS.items():
        if tier_rank <= rank and tier_rank >= TIER_RANKS[best]:
            best = tier
    return best.value


def required_rank(feature: str) -> int:
    """Minimum rank needed for a feature. Unknown features require rank 0."""
    return FEATURE_REQUIREMENTS.get(feature, 0)


def required_tier(feature: str) -> str:
    """Name of the lowest tier that unlocks a feature."""
    return tier_for_rank(required_rank(feature))


def tier_allows(rank: int, feature: str) -> bool:
    """Pure access decision for an already-resolved rank."""
    return rank >= required_rank(feature)
