"""
Tests for tier resolution against subscriptions and roles.
"""
from datetime import datetime, timedelta

from app.services.tier_service import (
    filter_allowed_features,
    has_feature_access,
    resolve_tier,
    resolve_tier_rank,
)


def test_user_without_subscription_is_free(db, plans, free_user):
    assert resolve_tier(db, free_user.id) == "free"
    assert resolve_tier_rank(db, free_user.id) == 0
    assert has_feature_access(db, free_user.id, "internet_search") is False


def test_pro_subscription_grants_pro_features(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "pro")

    assert resolve_tier(db, user.id) == "pro"
    assert has_feature_access(db, user.id, "internet_search") is True
    assert has_feature_access(db, user.id, "white_label") is False


def test_enterprise_subscription_grants_everything(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "enterprise")

    for feature in ("internet_search", "tailored_resume", "white_label", "precedent_finder"):
        assert has_feature_access(db, user.id, feature) is True


def test_highest_active_plan_wins(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "pro")
    subscribe(user, "enterprise")

    assert resolve_tier(db, user.id) == "enterprise"
    assert resolve_tier_rank(db, user.id) == 2


def test_open_ended_subscription_counts(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "pro", days=None)
    assert resolve_tier(db, user.id) == "pro"


def test_subscription_past_end_date_falls_back_to_role(db, make_user, subscribe):
    """An active row whose end date passed no longer grants its tier, even before the sweep."""
    user = make_user("free")
    subscribe(user, "enterprise", days=-1)

    assert resolve_tier(db, user.id) == "free"
    assert has_feature_access(db, user.id, "internet_search") is False


def test_inactive_statuses_do_not_count(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "pro", status="cancelled")
    subscribe(user, "enterprise", status="pending")
    assert resolve_tier(db, user.id) == "free"


def test_role_is_used_without_subscription(db, plans, make_user):
    user = make_user("pro")
    assert resolve_tier(db, user.id) == "pro"
    assert resolve_tier_rank(db, user.id) == 1


def test_admin_outranks_any_plan(db, make_user, subscribe):
    admin = make_user("admin")
    subscribe(admin, "pro")

    assert resolve_tier_rank(db, admin.id) == 999
    assert has_feature_access(db, admin.id, "white_label") is True
    # Tier name still follows the active plan
    assert resolve_tier(db, admin.id) == "pro"


def test_resolution_respects_explicit_now(db, make_user, subscribe):
    user = make_user("free")
    subscribe(user, "pro", days=10)
    later = datetime.utcnow() + timedelta(days=11)

    assert resolve_tier(db, user.id) == "pro"
    assert resolve_tier(db, user.id, now=later) == "free"


def test_filter_allowed_features_preserves_order_and_drops_duplicates(db, plans, free_user):
    allowed, denied = filter_allowed_features(
        db, free_user.id, ["basic_chat", "skills_gap_assessment", "basic_chat", "ats_compatibility"]
    )
    assert allowed == ["basic_chat"]
    assert denied == ["skills_gap_assessment", "ats_compatibility"]


def test_unknown_user_is_free(db, plans):
    assert resolve_tier(db, 12345) == "free"
    assert resolve_tier_rank(db, 12345) == 0
