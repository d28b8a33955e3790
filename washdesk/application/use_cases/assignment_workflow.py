from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from washdesk.application.exceptions import InvalidTransition, PreconditionFailed, TransportFailure
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.application.use_cases.resolve_candidates import ProfessionalAvailabilityResolver
from washdesk.domain.booking_status import apply_transition, assert_transition, check_side_effects
from washdesk.domain.entities.assignment import AssignmentInteraction, CandidateOutcome, InteractionPhase
from washdesk.domain.entities.booking import (
    UNSPECIFIED_CANCELLATION_REASON,
    Booking,
    BookingStatus,
    ProfessionalRef,
)
from washdesk.domain.entities.candidate import ProfessionalCandidate


class CommitStatus(str, Enum):
    COMMITTED = "committed"
    PRECONDITION_FAILED = "precondition_failed"
    SKIPPED = "skipped"  # another commit for the same interaction is in flight
    FAILED = "failed"


@dataclass(frozen=True)
class CommitResult:
    status: CommitStatus
    booking: Booking | None = None
    error: Exception | None = None


class AssignmentWorkflowController:
    """
    Orchestrate professional assignment and status changes for bookings.

    The controller owns the authoritative in-memory booking records and the
    current assignment interaction. Records change only after the backend
    confirms; callers get frozen bookings and copies of the interaction.
    """

    def __init__(self, repository: BookingRepositoryPort, resolver: ProfessionalAvailabilityResolver) -> None:
        self._repository = repository
        self._resolver = resolver
        self._bookings: dict[str, Booking] = {}
        self._candidate_cache: dict[str, list[ProfessionalCandidate]] = {}
        self._interaction: AssignmentInteraction | None = None
        self._resolve_generation = 0
        self._logger = logging.getLogger(__name__)

    # Booking records

    def register(self, booking: Booking) -> Booking:
        """Track a booking obtained elsewhere (e.g. a list view) so status checks stay local."""
        self._bookings[booking.id] = booking
        return booking

    def snapshot(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def tracked_bookings(self) -> list[Booking]:
        return list(self._bookings.values())

    async def load_booking(self, booking_id: str, refresh: bool = False) -> Booking:
        if not refresh and booking_id in self._bookings:
            return self._bookings[booking_id]
        booking = await self._repository.get_booking_by_id(booking_id)
        self._bookings[booking_id] = booking
        return booking

    # Assignment interaction

    @property
    def interaction(self) -> AssignmentInteraction | None:
        if self._interaction is None:
            return None
        return _copy_interaction(self._interaction)

    async def open(self, booking_id: str) -> AssignmentInteraction:
        """Start an assignment interaction, fetching candidates unless some are cached for the booking."""
        interaction = AssignmentInteraction(booking_id=booking_id, phase=InteractionPhase.OPENING)
        self._interaction = interaction

        cached = self._candidate_cache.get(booking_id)
        if cached:
            interaction.candidates = list(cached)
            interaction.outcome = CandidateOutcome.AVAILABLE
            interaction.phase = InteractionPhase.READY
            return _copy_interaction(interaction)

        await self._resolve_into(interaction)
        return _copy_interaction(interaction)

    async def retry(self) -> AssignmentInteraction:
        """Fetch candidates again, replacing the current list."""
        interaction = self._require_interaction()
        if interaction.phase is InteractionPhase.COMMITTING:
            return _copy_interaction(interaction)
        self._candidate_cache.pop(interaction.booking_id, None)
        await self._resolve_into(interaction)
        return _copy_interaction(interaction)

    def select(self, candidate_id: str) -> bool:
        interaction = self._interaction
        if interaction is None or interaction.phase is InteractionPhase.COMMITTING:
            return False
        if interaction.find_candidate(candidate_id) is None:
            return False
        interaction.selected_candidate_id = candidate_id
        return True

    def close(self) -> None:
        if self._interaction is not None:
            self._interaction.phase = InteractionPhase.CLOSED
            self._interaction = None

    async def commit(self) -> CommitResult:
        interaction = self._interaction
        if interaction is None:
            return _precondition_failed("No assignment interaction is open.")
        if interaction.in_flight:
            if interaction.phase is InteractionPhase.COMMITTING:
                self._logger.info(
                    "Assignment commit already in flight",
                    extra={"booking_id": interaction.booking_id},
                )
                return CommitResult(status=CommitStatus.SKIPPED)
            return _precondition_failed("Candidates are still loading.")
        if not interaction.candidates:
            return _precondition_failed("No professionals are available for this booking.")
        selected = interaction.selected_candidate
        if selected is None:
            return _precondition_failed("Select a professional to assign.")

        booking_id = interaction.booking_id
        known = self._bookings.get(booking_id)
        if known is not None and known.is_terminal:
            return _precondition_failed(f"Booking {booking_id} is {known.status.value} and cannot be reassigned.")

        interaction.in_flight = True
        interaction.phase = InteractionPhase.COMMITTING
        interaction.last_error = None
        try:
            updated = await self._repository.assign_professional(booking_id, selected.id)
        except TransportFailure as e:
            interaction.in_flight = False
            interaction.phase = InteractionPhase.READY
            interaction.last_error = e
            self._logger.error(
                "Professional assignment failed",
                extra={"booking_id": booking_id, "candidate_id": selected.id, "error": str(e)},
            )
            return CommitResult(status=CommitStatus.FAILED, error=e)
        except Exception:
            interaction.in_flight = False
            interaction.phase = InteractionPhase.READY
            raise

        if updated.professional is None:
            updated = updated.with_changes(
                professional=ProfessionalRef(id=selected.id, name=selected.name, rating=selected.rating)
            )

        interaction.in_flight = False
        interaction.phase = InteractionPhase.CLOSED
        if self._interaction is interaction:
            self._interaction = None
        self._candidate_cache.pop(booking_id, None)

        current = self._bookings.get(booking_id)
        if current is not None and current is not known:
            # The record changed while the assignment was in flight.
            if current.is_terminal:
                self._logger.warning(
                    "Discarding assignment for a booking that became terminal",
                    extra={"booking_id": booking_id, "candidate_id": selected.id, "status": current.status.value},
                )
                return CommitResult(
                    status=CommitStatus.FAILED,
                    booking=current,
                    error=PreconditionFailed(f"Booking {booking_id} became {current.status.value} during assignment."),
                )
            updated = current.with_changes(professional=updated.professional)
        self._bookings[booking_id] = updated

        self._logger.info(
            "Professional assigned",
            extra={"booking_id": booking_id, "candidate_id": selected.id, "status": updated.status.value},
        )
        return CommitResult(status=CommitStatus.COMMITTED, booking=updated)

    # Status changes

    async def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        cleaned_reason = (reason or "").strip()
        if not cleaned_reason:
            raise PreconditionFailed("A cancellation reason is required.")

        booking = await self.load_booking(booking_id)
        cancelled = apply_transition(booking, BookingStatus.CANCELLED, cleaned_reason)

        try:
            confirmed = await self._repository.cancel_booking(booking_id, cleaned_reason)
        except TransportFailure as e:
            self._logger.error(
                "Booking cancellation failed",
                extra={"booking_id": booking_id, "reason": cleaned_reason, "error": str(e)},
            )
            raise

        if confirmed.status is BookingStatus.CANCELLED:
            if confirmed.cancellation_reason == UNSPECIFIED_CANCELLATION_REASON:
                confirmed = confirmed.with_changes(cancellation_reason=cleaned_reason)
        else:
            confirmed = cancelled.with_changes(updated_at=confirmed.updated_at or cancelled.updated_at)

        self._bookings[booking_id] = confirmed
        if self._interaction is not None and self._interaction.booking_id == booking_id:
            self.close()
        self._candidate_cache.pop(booking_id, None)

        self._logger.info(
            "Booking cancelled",
            extra={"booking_id": booking_id, "status": BookingStatus.CANCELLED.value, "reason": cleaned_reason},
        )
        return confirmed

    async def update_booking_status(self, booking_id: str, status: BookingStatus | str) -> Booking:
        booking = await self.load_booking(booking_id)
        try:
            target = BookingStatus.parse(status)
        except ValueError:
            raise InvalidTransition(booking.status.value, str(status)) from None

        assert_transition(booking.status, target)
        if target is BookingStatus.CANCELLED:
            raise PreconditionFailed("Cancelling a booking requires a reason; use cancel_booking.")
        check_side_effects(booking, target)

        try:
            updated = await self._repository.update_booking_status(booking_id, target.value)
        except TransportFailure as e:
            self._logger.error(
                "Booking status update failed",
                extra={"booking_id": booking_id, "status": target.value, "error": str(e)},
            )
            raise

        if updated.status is not target:
            # The backend confirmed the change but echoed a stale document.
            self._logger.warning(
                "Backend returned a stale booking status",
                extra={"booking_id": booking_id, "status": updated.status.value},
            )
            updated = apply_transition(booking, target)
        elif updated.professional is None and booking.professional is not None:
            updated = updated.with_changes(professional=booking.professional)

        self._bookings[booking_id] = updated
        self._logger.info("Booking status updated", extra={"booking_id": booking_id, "status": target.value})
        return updated

    async def start_service(self, booking_id: str) -> Booking:
        return await self.update_booking_status(booking_id, BookingStatus.ONGOING)

    async def complete_service(self, booking_id: str) -> Booking:
        return await self.update_booking_status(booking_id, BookingStatus.COMPLETED)

    # Internals

    def _require_interaction(self) -> AssignmentInteraction:
        if self._interaction is None:
            raise PreconditionFailed("No assignment interaction is open.")
        return self._interaction

    def _is_current(self, interaction: AssignmentInteraction, generation: int) -> bool:
        return self._interaction is interaction and self._resolve_generation == generation

    async def _resolve_into(self, interaction: AssignmentInteraction) -> None:
        self._resolve_generation += 1
        generation = self._resolve_generation

        interaction.in_flight = True
        interaction.phase = InteractionPhase.OPENING
        interaction.last_error = None
        try:
            resolution = await self._resolver.resolve_candidates(interaction.booking_id)
        except Exception:
            if self._is_current(interaction, generation):
                interaction.in_flight = False
                interaction.phase = InteractionPhase.FAILED
            raise

        if not self._is_current(interaction, generation):
            # A newer open/retry started while this lookup was in flight; it owns the list.
            self._logger.info(
                "Discarding stale candidate lookup",
                extra={"booking_id": interaction.booking_id, "outcome": resolution.outcome.value},
            )
            return

        interaction.in_flight = False
        interaction.candidates = list(resolution.candidates)
        interaction.outcome = resolution.outcome
        if interaction.find_candidate(interaction.selected_candidate_id) is None:
            interaction.selected_candidate_id = None

        if resolution.outcome is CandidateOutcome.TRANSPORT_FAILURE:
            interaction.phase = InteractionPhase.FAILED
            interaction.last_error = resolution.error
            self._candidate_cache.pop(interaction.booking_id, None)
            return

        interaction.phase = InteractionPhase.READY
        if resolution.candidates:
            self._candidate_cache[interaction.booking_id] = list(resolution.candidates)
        else:
            self._candidate_cache.pop(interaction.booking_id, None)


def _precondition_failed(reason: str) -> CommitResult:
    return CommitResult(status=CommitStatus.PRECONDITION_FAILED, error=PreconditionFailed(reason))


def _copy_interaction(interaction: AssignmentInteraction) -> AssignmentInteraction:
    return replace(interaction, candidates=list(interaction.candidates))
