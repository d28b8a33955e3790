from __future__ import annotations

import logging
from dataclasses import dataclass, field

from washdesk.application.exceptions import TransportFailure
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.application.utils.candidate_normalizer import normalize_candidates
from washdesk.domain.entities.assignment import CandidateOutcome
from washdesk.domain.entities.candidate import CandidateSource, ProfessionalCandidate

ACTIVE_PROFESSIONAL_STATUS = "active"


@dataclass(frozen=True)
class CandidateResolution:
    """Result of one candidate lookup."""

    outcome: CandidateOutcome
    candidates: list[ProfessionalCandidate] = field(default_factory=list)
    source: CandidateSource | None = None  # which lookup produced the list
    error: TransportFailure | None = None  # last transport failure seen, if any


class ProfessionalAvailabilityResolver:
    """
    Find professionals that can be assigned to a booking.

    The booking-scoped lookup is tried first. When it fails or comes back
    empty, the active-professionals listing is queried once. Both shapes are
    normalized into ``ProfessionalCandidate`` records.
    """

    def __init__(self, repository: BookingRepositoryPort, fallback_page_limit: int = 50) -> None:
        self._repository = repository
        self._fallback_page_limit = fallback_page_limit
        self._logger = logging.getLogger(__name__)

    async def resolve_candidates(self, booking_id: str) -> CandidateResolution:
        primary_error: TransportFailure | None = None
        try:
            payload = await self._repository.get_available_professionals(booking_id)
        except TransportFailure as e:
            primary_error = e
            self._logger.warning(
                "Primary professional lookup failed, using fallback",
                extra={"booking_id": booking_id, "error": str(e)},
            )
        else:
            candidates = normalize_candidates(payload, CandidateSource.PRIMARY)
            if candidates:
                return CandidateResolution(
                    outcome=CandidateOutcome.AVAILABLE,
                    candidates=candidates,
                    source=CandidateSource.PRIMARY,
                )
            self._logger.info(
                "Primary professional lookup returned no candidates, using fallback",
                extra={"booking_id": booking_id},
            )

        try:
            payload = await self._repository.get_professionals(
                page=1,
                limit=self._fallback_page_limit,
                status=ACTIVE_PROFESSIONAL_STATUS,
            )
        except TransportFailure as e:
            # Only a failed primary lookup is covered by the fallback; a failed fallback always surfaces.
            self._logger.error(
                "Both professional lookups failed" if primary_error is not None else "Fallback professional lookup failed",
                extra={"booking_id": booking_id, "outcome": CandidateOutcome.TRANSPORT_FAILURE.value, "error": str(e)},
            )
            return CandidateResolution(outcome=CandidateOutcome.TRANSPORT_FAILURE, error=e)

        candidates = normalize_candidates(payload, CandidateSource.FALLBACK)
        if not candidates:
            self._logger.info(
                "No professionals available",
                extra={"booking_id": booking_id, "outcome": CandidateOutcome.NO_CANDIDATES_AVAILABLE.value},
            )
            return CandidateResolution(
                outcome=CandidateOutcome.NO_CANDIDATES_AVAILABLE,
                source=CandidateSource.FALLBACK,
                error=primary_error,
            )

        self._logger.info(
            "Professional candidates resolved",
            extra={"booking_id": booking_id, "source": CandidateSource.FALLBACK.value, "outcome": CandidateOutcome.AVAILABLE.value},
        )
        return CandidateResolution(
            outcome=CandidateOutcome.AVAILABLE,
            candidates=candidates,
            source=CandidateSource.FALLBACK,
            error=primary_error,
        )
