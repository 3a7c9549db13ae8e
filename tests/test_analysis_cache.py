"""
Tests for the content-addressed analysis cache.
"""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import CacheLookupError, PersistenceError
from app.db.models.analysis_record import AnalysisRecord
from app.schemas.analysis import AnalysisResult
from app.services.analysis_cache import (
    fingerprint,
    fingerprint_pair,
    lookup_cached_analysis,
    store_analysis,
)


def test_fingerprint_is_sha256_hex():
    assert fingerprint("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert len(fingerprint("")) == 64


def test_fingerprint_is_case_and_whitespace_sensitive():
    assert fingerprint("Python developer") != fingerprint("python developer")
    assert fingerprint("Python developer") != fingerprint("Python developer ")


def test_distinct_texts_give_distinct_pairs():
    assert fingerprint_pair("resume A", "job B") != fingerprint_pair("resume A", "job C")
    assert fingerprint_pair("resume A", "job B") == fingerprint_pair("resume A", "job B")


def test_store_then_lookup(db, free_user, make_payload):
    result = AnalysisResult.model_validate(make_payload(score=72))
    hashes = fingerprint_pair("resume A", "job B")

    record = store_analysis(db, free_user.id, "resume A", "job B", hashes, result)

    assert record.compatibility_score == 72
    assert record.keyword_matches == ["Python", "FastAPI"]
    assert record.skill_gaps == ["Kubernetes"]
    assert record.experience_gaps == ["Add a project that shows container orchestration"]
    assert record.original_resume_text == "resume A"

    found = lookup_cached_analysis(db, free_user.id, *hashes)
    assert found.id == record.id
    assert AnalysisResult.model_validate(found.analysis_details).match_score == "72/100"


def test_lookup_miss_returns_none(db, free_user):
    assert lookup_cached_analysis(db, free_user.id, *fingerprint_pair("x", "y")) is None


def test_cache_is_per_user(db, make_user, make_payload):
    owner, other = make_user(), make_user()
    hashes = fingerprint_pair("resume A", "job B")
    store_analysis(db, owner.id, "resume A", "job B", hashes, AnalysisResult.model_validate(make_payload()))

    assert lookup_cached_analysis(db, other.id, *hashes) is None


def test_duplicate_store_keeps_a_single_row(db, free_user, make_payload):
    """A concurrent identical request loses the insert and gets the winner's row."""
    hashes = fingerprint_pair("resume A", "job B")
    first = store_analysis(db, free_user.id, "resume A", "job B", hashes, AnalysisResult.model_validate(make_payload(score=72)))
    second = store_analysis(db, free_user.id, "resume A", "job B", hashes, AnalysisResult.model_validate(make_payload(score=40)))

    assert second.id == first.id
    assert second.compatibility_score == 72
    assert db.query(AnalysisRecord).count() == 1


def test_lookup_failure_is_not_a_miss(db, free_user):
    with patch.object(db, "query", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
        with pytest.raises(CacheLookupError):
            lookup_cached_analysis(db, free_user.id, "a" * 64, "b" * 64)


def test_store_failure_raises_persistence_error(db, free_user, make_payload):
    result = AnalysisResult.model_validate(make_payload())
    with patch.object(db, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
        with pytest.raises(PersistenceError):
            store_analysis(db, free_user.id, "r", "j", fingerprint_pair("r", "j"), result)
