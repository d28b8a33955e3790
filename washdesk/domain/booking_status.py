"""Booking status state machine."""

from __future__ import annotations

from enum import Enum

from washdesk.application.exceptions import InvalidTransition, PreconditionFailed
from washdesk.domain.entities.booking import Booking, BookingStatus

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.ONGOING, BookingStatus.CANCELLED}),
    BookingStatus.ONGOING: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class SideEffect(str, Enum):
    REASON = "reason"  # a non-empty cancellation reason
    ASSIGNED_PROFESSIONAL = "assigned_professional"  # professional attached before/with the change


_REQUIRED_SIDE_EFFECTS: dict[BookingStatus, frozenset[SideEffect]] = {
    BookingStatus.CANCELLED: frozenset({SideEffect.REASON}),
    BookingStatus.ONGOING: frozenset({SideEffect.ASSIGNED_PROFESSIONAL}),
}


def can_transition(current: BookingStatus | str, target: BookingStatus | str) -> bool:
    current_status = BookingStatus.parse(current)
    target_status = BookingStatus.parse(target)
    return target_status in BOOKING_TRANSITIONS.get(current_status, frozenset())


def required_side_effects(target: BookingStatus | str) -> frozenset[SideEffect]:
    return _REQUIRED_SIDE_EFFECTS.get(BookingStatus.parse(target), frozenset())


def assert_transition(current: BookingStatus | str, target: BookingStatus | str) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(BookingStatus.parse(current).value, BookingStatus.parse(target).value)


def check_side_effects(booking: Booking, target: BookingStatus | str, reason: str | None = None) -> None:
    for effect in required_side_effects(target):
        if effect is SideEffect.REASON and not (reason or "").strip():
            raise PreconditionFailed("A cancellation reason is required.")
        if effect is SideEffect.ASSIGNED_PROFESSIONAL and booking.professional is None:
            raise PreconditionFailed(
                f"Booking {booking.id} has no professional assigned; assign one before starting the service."
            )


def apply_transition(booking: Booking, target: BookingStatus | str, reason: str | None = None) -> Booking:
    """Validate a status change and return the updated copy. The input booking is never modified."""
    target_status = BookingStatus.parse(target)
    assert_transition(booking.status, target_status)
    check_side_effects(booking, target_status, reason)
    if target_status is BookingStatus.CANCELLED:
        return booking.with_changes(status=target_status, cancellation_reason=(reason or "").strip())
    return booking.with_changes(status=target_status)
