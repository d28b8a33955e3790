from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

UNKNOWN_PROFESSIONAL_NAME = "Unknown"


class CandidateSource(str, Enum):
    PRIMARY = "primary"  # booking-scoped "available professionals" lookup
    FALLBACK = "fallback"  # active-professionals listing


@dataclass(frozen=True)
class ProfessionalCandidate:
    """A professional offered for one assignment interaction. Rebuilt on every fetch."""

    id: str
    name: str
    rating: float = 0.0
    experience: str = ""
    availability: bool = True
    source: CandidateSource = CandidateSource.PRIMARY


def professional_display_name(raw: dict[str, Any]) -> str:
    """Pick a display name from a raw professional record: name, user.name, phone, else "Unknown"."""
    name = raw.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()

    user = raw.get("user")
    if isinstance(user, dict):
        user_name = user.get("name")
        if isinstance(user_name, str) and user_name.strip():
            return user_name.strip()

    phone = raw.get("phone")
    if phone is None and isinstance(user, dict):
        phone = user.get("phone")
    if phone is not None and str(phone).strip():
        return str(phone).strip()

    return UNKNOWN_PROFESSIONAL_NAME


def coerce_rating(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
