"""
Tests for the tier table and pure access decisions.
"""
from app.core.tiers import (
    FEATURE_REQUIREMENTS,
    normalize_tier_name,
    rank_for_tier,
    required_rank,
    required_tier,
    tier_allows,
    tier_for_rank,
)

ENTERPRISE_FEATURES = [f for f, rank in FEATURE_REQUIREMENTS.items() if rank == 2]
PRO_FEATURES = [f for f, rank in FEATURE_REQUIREMENTS.items() if rank == 1]


def test_plan_names_normalize_to_tiers():
    assert normalize_tier_name("Pro") == "pro"
    assert normalize_tier_name(" Enterprise ") == "enterprise"
    assert normalize_tier_name(None) == "free"
    assert normalize_tier_name("platinum") == "free"


def test_ranks():
    assert rank_for_tier("free") == 0
    assert rank_for_tier("pro") == 1
    assert rank_for_tier("enterprise") == 2
    assert rank_for_tier("admin") == 999
    assert rank_for_tier("unknown") == 0


def test_unknown_features_are_open_to_everyone():
    """Features missing from the table need rank 0."""
    assert required_rank("basic_chat") == 0
    assert required_rank("job_match_analysis") == 0
    assert tier_allows(0, "document_upload")


def test_pro_unlocks_pro_features_only():
    assert all(tier_allows(1, f) for f in PRO_FEATURES)
    assert not any(tier_allows(1, f) for f in ENTERPRISE_FEATURES)
    assert not tier_allows(0, "internet_search")


def test_enterprise_unlocks_everything():
    assert all(tier_allows(2, f) for f in PRO_FEATURES + ENTERPRISE_FEATURES)


def test_admin_rank_unlocks_everything():
    assert all(tier_allows(999, f) for f in FEATURE_REQUIREMENTS)


def test_required_tier_names():
    assert required_tier("internet_search") == "pro"
    assert required_tier("white_label") == "enterprise"
    assert required_tier("basic_search") == "free"
    assert tier_for_rank(5) == "enterprise"
