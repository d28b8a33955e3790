from __future__ import annotations

from typing import Any

from washdesk.domain.entities.candidate import (
    CandidateSource,
    ProfessionalCandidate,
    coerce_rating,
    professional_display_name,
)

# Keys under which a list of professionals has been observed, pagination ones included.
_LIST_KEYS = ("professionals", "items", "docs", "results")
# data.data.professionals is the deepest nesting seen so far.
_MAX_DATA_DEPTH = 4
_AVAILABILITY_KEYS = ("isAvailable", "availability", "available")


def extract_professional_list(payload: Any) -> list[dict[str, Any]]:
    """
    Find the list of raw professional records inside a response payload.

    Accepts a bare list, a dict holding the list under one of the known keys,
    or any of those nested under one or more ``data`` keys. Anything else is
    treated as an empty list.
    """
    current = payload
    for _ in range(_MAX_DATA_DEPTH):
        if isinstance(current, list):
            return [item for item in current if isinstance(item, dict)]
        if not isinstance(current, dict):
            return []
        for key in _LIST_KEYS:
            value = current.get(key)
            if isinstance(value, list):
                return [item for item in value if isinstance(item, dict)]
        current = current.get("data")
    return []


def normalize_candidate(raw: dict[str, Any], source: CandidateSource) -> ProfessionalCandidate | None:
    """Build a candidate from one raw record. Records without an id cannot be assigned and are dropped."""
    candidate_id = raw.get("_id") or raw.get("id")
    if candidate_id is None or not str(candidate_id).strip():
        return None

    return ProfessionalCandidate(
        id=str(candidate_id).strip(),
        name=professional_display_name(raw),
        rating=coerce_rating(raw.get("rating")),
        experience=_experience_summary(raw),
        availability=_is_available(raw, source),
        source=source,
    )


def normalize_candidates(payload: Any, source: CandidateSource) -> list[ProfessionalCandidate]:
    candidates: list[ProfessionalCandidate] = []
    seen: set[str] = set()
    for raw in extract_professional_list(payload):
        candidate = normalize_candidate(raw, source)
        if candidate is None or candidate.id in seen:
            continue
        seen.add(candidate.id)
        candidates.append(candidate)
    return candidates


def _experience_summary(raw: dict[str, Any]) -> str:
    specializations = raw.get("specializations")
    if isinstance(specializations, list):
        names = []
        for item in specializations:
            if isinstance(item, dict):
                item = item.get("name") or item.get("title")
            if isinstance(item, str) and item.strip():
                names.append(item.strip())
        if names:
            return ", ".join(names)

    experience = raw.get("experience")
    if experience is None or isinstance(experience, (dict, list)):
        return ""
    return str(experience).strip()


def _is_available(raw: dict[str, Any], source: CandidateSource) -> bool:
    if source is not CandidateSource.FALLBACK:
        return True
    return not any(raw.get(key) is False for key in _AVAILABILITY_KEYS)
