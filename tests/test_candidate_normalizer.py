"""
Tests for turning raw professional payloads into candidates.
"""

from __future__ import annotations

import pytest

from washdesk.application.utils.candidate_normalizer import (
    extract_professional_list,
    normalize_candidate,
    normalize_candidates,
)
from washdesk.domain.entities.candidate import CandidateSource

RECORD = {"_id": "P1", "name": "Rajesh Kumar"}


@pytest.mark.parametrize(
    "raw, expected_id, expected_name",
    [
        ({"_id": "P1", "name": "Rajesh Kumar"}, "P1", "Rajesh Kumar"),
        ({"id": "P2", "user": {"name": "Amit Singh"}}, "P2", "Amit Singh"),
        ({"_id": "P3", "phone": "+91 9876543230"}, "P3", "+91 9876543230"),
        ({"_id": "P4"}, "P4", "Unknown"),
    ],
)
def test_every_candidate_has_name_and_numeric_rating(raw, expected_id, expected_name):
    candidate = normalize_candidate(raw, CandidateSource.PRIMARY)

    assert candidate.id == expected_id
    assert candidate.name == expected_name
    assert candidate.rating == 0.0
    assert isinstance(candidate.rating, float)


@pytest.mark.parametrize(
    "payload",
    [
        [RECORD],
        {"professionals": [RECORD]},
        {"data": {"professionals": [RECORD]}},
        {"data": {"data": {"professionals": [RECORD]}}},
        {"data": [RECORD]},
        {"items": [RECORD], "page": 1, "total": 1},
        {"data": {"items": [RECORD]}},
        {"docs": [RECORD]},
    ],
)
def test_extract_professional_list_handles_observed_shapes(payload):
    assert extract_professional_list(payload) == [RECORD]


@pytest.mark.parametrize("payload", [None, "nope", 7, {"data": None}, {"count": 3}, {"data": {"total": 0}}])
def test_unrecognized_payloads_yield_nothing(payload):
    assert extract_professional_list(payload) == []


def test_experience_joins_specializations():
    candidate = normalize_candidate(
        {"_id": "P1", "specializations": ["Premium Wash", {"name": "Polish"}, ""], "experience": "3 years"},
        CandidateSource.PRIMARY,
    )

    assert candidate.experience == "Premium Wash, Polish"


def test_experience_falls_back_to_free_text():
    assert normalize_candidate({"_id": "P1", "experience": "5 years"}, CandidateSource.PRIMARY).experience == "5 years"
    assert normalize_candidate({"_id": "P1", "specializations": []}, CandidateSource.PRIMARY).experience == ""


def test_rating_is_coerced():
    assert normalize_candidate({"_id": "P1", "rating": "4.5"}, CandidateSource.PRIMARY).rating == 4.5
    assert normalize_candidate({"_id": "P1", "rating": "great"}, CandidateSource.PRIMARY).rating == 0.0
    assert normalize_candidate({"_id": "P1", "rating": None}, CandidateSource.PRIMARY).rating == 0.0


def test_only_fallback_source_can_mark_unavailable():
    raw = {"_id": "P1", "name": "Rajesh", "isAvailable": False}

    assert normalize_candidate(raw, CandidateSource.FALLBACK).availability is False
    assert normalize_candidate(raw, CandidateSource.PRIMARY).availability is True
    assert normalize_candidate({"_id": "P2"}, CandidateSource.FALLBACK).availability is True


def test_records_without_id_and_duplicates_are_dropped():
    candidates = normalize_candidates(
        {"professionals": [{"name": "Ghost"}, {"_id": "P1", "name": "First"}, {"id": "P1", "name": "Again"}]},
        CandidateSource.FALLBACK,
    )

    assert [(c.id, c.name, c.source) for c in candidates] == [("P1", "First", CandidateSource.FALLBACK)]
