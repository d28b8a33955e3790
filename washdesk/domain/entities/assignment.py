from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from washdesk.domain.entities.candidate import ProfessionalCandidate


class InteractionPhase(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    READY = "ready"  # candidates fetched; the list may legitimately be empty
    FAILED = "failed"  # candidates could not be fetched at all
    COMMITTING = "committing"


class CandidateOutcome(str, Enum):
    AVAILABLE = "available"
    NO_CANDIDATES_AVAILABLE = "no_candidates_available"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass
class AssignmentInteraction:
    """Session-scoped state of one "assign/reassign professional" action. Never persisted."""

    booking_id: str
    candidates: list[ProfessionalCandidate] = field(default_factory=list)
    selected_candidate_id: str | None = None
    in_flight: bool = False
    last_error: Exception | None = None
    phase: InteractionPhase = InteractionPhase.CLOSED
    outcome: CandidateOutcome | None = None

    def find_candidate(self, candidate_id: str | None) -> ProfessionalCandidate | None:
        if candidate_id is None:
            return None
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None

    @property
    def selected_candidate(self) -> ProfessionalCandidate | None:
        return self.find_candidate(self.selected_candidate_id)
