"""
Tests for analysis invocation: validation, tier filtering, caching, persistence.
"""
from unittest.mock import MagicMock, patch

import pytest

from app.core.exceptions import AnalysisProviderError, AnalysisValidationError, PersistenceError
from app.db.models.analysis_record import AnalysisRecord
from app.services import analysis_service

RESUME = "Senior Python developer. Built FastAPI services for six years."
JOB = "Backend engineer: Python, FastAPI, Kubernetes."


def test_resubmission_is_served_from_cache(db, free_user, provider, fake_llm, make_payload):
    """Submit A/B, then A/B again: same 72 score, cache flag set, provider called once."""
    fake_llm.queue(make_payload(score=72))

    first = analysis_service.analyze(db, free_user.id, RESUME, JOB, [], provider)
    second = analysis_service.analyze(db, free_user.id, RESUME, JOB, [], provider)

    assert first.cached is False
    assert first.saved is True
    assert second.cached is True
    assert second.result.numeric_score() == 72
    assert second.analysis_id == first.analysis_id
    assert len(fake_llm.calls) == 1


def test_any_text_change_misses_the_cache(db, free_user, provider, fake_llm):
    analysis_service.analyze(db, free_user.id, RESUME, JOB, [], provider)
    outcome = analysis_service.analyze(db, free_user.id, RESUME + " ", JOB, [], provider)

    assert outcome.cached is False
    assert len(fake_llm.calls) == 2
    assert db.query(AnalysisRecord).count() == 2


def test_free_user_premium_type_is_filtered_before_the_call(db, free_user, provider, fake_llm, make_payload, section):
    fake_llm.queue(make_payload(skills_gap_assessment=section()))

    outcome = analysis_service.analyze(db, free_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)

    assert outcome.skipped_types == ["skills_gap_assessment"]
    assert "skills_gap_assessment" not in fake_llm.calls[0]["messages"][1]["content"]
    # Even if the model volunteers the section it is not returned
    assert outcome.result.skills_gap_assessment is None


def test_pro_user_gets_requested_premium_sections(db, pro_user, provider, fake_llm, make_payload, section):
    fake_llm.queue(make_payload(
        skills_gap_assessment=section(6),
        ats_compatibility=section(8),
    ))

    outcome = analysis_service.analyze(db, pro_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)

    assert outcome.skipped_types == []
    assert outcome.result.skills_gap_assessment.score == 6
    # Not requested, so dropped
    assert outcome.result.ats_compatibility is None
    record = db.query(AnalysisRecord).one()
    assert record.analysis_types == ["skills_gap_assessment"]


def test_base_type_is_always_allowed(db, free_user, provider):
    outcome = analysis_service.analyze(db, free_user.id, RESUME, JOB, ["job_match_analysis"], provider)
    assert outcome.skipped_types == []


@pytest.mark.parametrize("resume, job", [("", JOB), ("   ", JOB), (RESUME, ""), (RESUME, "\n\t")])
def test_blank_input_fails_before_any_external_call(resume, job):
    provider = MagicMock()
    db = MagicMock()

    with pytest.raises(AnalysisValidationError):
        analysis_service.analyze(db, 1, resume, job, [], provider)

    provider.analyze.assert_not_called()
    db.query.assert_not_called()


def test_unknown_analysis_type_is_rejected(db, free_user, provider, fake_llm):
    with pytest.raises(AnalysisValidationError):
        analysis_service.analyze(db, free_user.id, RESUME, JOB, ["horoscope"], provider)
    assert fake_llm.calls == []


def test_provider_failure_stores_nothing(db, free_user, provider, fake_llm):
    fake_llm.queue(TimeoutError("timed out"))

    with pytest.raises(AnalysisProviderError):
        analysis_service.analyze(db, free_user.id, RESUME, JOB, [], provider)

    assert db.query(AnalysisRecord).count() == 0


def test_persistence_failure_still_returns_the_result(db, free_user, provider, make_payload, fake_llm):
    fake_llm.queue(make_payload(score=55))

    with patch.object(analysis_service, "store_analysis", side_effect=PersistenceError("down")):
        outcome = analysis_service.analyze(db, free_user.id, RESUME, JOB, [], provider)

    assert outcome.saved is False
    assert outcome.analysis_id is None
    assert outcome.result.numeric_score() == 55


def test_list_and_get_are_owner_scoped(db, make_user, provider):
    owner, other = make_user(), make_user()
    outcome = analysis_service.analyze(db, owner.id, RESUME, JOB, [], provider)

    records, total = analysis_service.list_analyses(db, owner.id)
    assert total == 1
    assert records[0].id == outcome.analysis_id

    assert analysis_service.get_analysis(db, owner.id, outcome.analysis_id) is not None
    assert analysis_service.get_analysis(db, other.id, outcome.analysis_id) is None
    assert analysis_service.list_analyses(db, other.id) == ([], 0)


def test_cache_hit_after_upgrade_reports_sections_it_lacks(db, free_user, subscribe, provider, fake_llm):
    analysis_service.analyze(db, free_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)
    subscribe(free_user, "pro")

    outcome = analysis_service.analyze(db, free_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)

    assert outcome.cached is True
    assert outcome.skipped_types == []
    assert outcome.not_in_cached_result == ["skills_gap_assessment"]
    assert outcome.result.skills_gap_assessment is None
    assert len(fake_llm.calls) == 1


def test_cache_hit_with_stored_section_reports_nothing_missing(db, pro_user, provider, fake_llm, make_payload, section):
    fake_llm.queue(make_payload(skills_gap_assessment=section(6)))
    analysis_service.analyze(db, pro_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)

    outcome = analysis_service.analyze(db, pro_user.id, RESUME, JOB, ["skills_gap_assessment"], provider)

    assert outcome.cached is True
    assert outcome.not_in_cached_result == []
