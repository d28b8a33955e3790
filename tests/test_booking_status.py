"""
Tests for the booking status state machine.
"""

from __future__ import annotations

import pytest

from washdesk.application.exceptions import InvalidTransition, PreconditionFailed
from washdesk.domain.booking_status import (
    SideEffect,
    apply_transition,
    assert_transition,
    can_transition,
    required_side_effects,
)
from washdesk.domain.entities.booking import Booking, BookingStatus, ProfessionalRef


@pytest.mark.parametrize("status", list(BookingStatus))
def test_self_transitions_are_rejected(status):
    assert can_transition(status, status) is False


@pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
@pytest.mark.parametrize("target", list(BookingStatus))
def test_terminal_states_have_no_outgoing_transitions(terminal, target):
    assert can_transition(terminal, target) is False


def test_pending_must_pass_through_ongoing_to_complete():
    assert can_transition(BookingStatus.PENDING, BookingStatus.COMPLETED) is False
    assert can_transition(BookingStatus.PENDING, BookingStatus.ONGOING) is True
    assert can_transition(BookingStatus.ONGOING, BookingStatus.COMPLETED) is True


def test_cancellation_allowed_only_from_pending_or_ongoing():
    assert can_transition("pending", "cancelled") is True
    assert can_transition("ongoing", "cancelled") is True
    assert can_transition("completed", "cancelled") is False


def test_ongoing_cannot_go_back_to_pending():
    assert can_transition(BookingStatus.ONGOING, BookingStatus.PENDING) is False


def test_status_aliases_are_understood():
    assert can_transition("confirmed", "in_progress") is True


def test_required_side_effects():
    assert required_side_effects(BookingStatus.CANCELLED) == frozenset({SideEffect.REASON})
    assert required_side_effects(BookingStatus.ONGOING) == frozenset({SideEffect.ASSIGNED_PROFESSIONAL})
    assert required_side_effects(BookingStatus.COMPLETED) == frozenset()
    assert required_side_effects(BookingStatus.PENDING) == frozenset()


def test_assert_transition_reports_both_ends():
    with pytest.raises(InvalidTransition) as exc_info:
        assert_transition(BookingStatus.COMPLETED, BookingStatus.CANCELLED)

    assert exc_info.value.from_status == "completed"
    assert exc_info.value.to_status == "cancelled"


def test_start_requires_assigned_professional():
    booking = Booking(id="B1", status=BookingStatus.PENDING)

    with pytest.raises(PreconditionFailed):
        apply_transition(booking, BookingStatus.ONGOING)

    assigned = booking.with_changes(professional=ProfessionalRef(id="P1", name="Amit"))
    started = apply_transition(assigned, BookingStatus.ONGOING)
    assert started.status is BookingStatus.ONGOING
    assert started.professional.id == "P1"


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_cancel_requires_non_blank_reason(reason):
    booking = Booking(id="B1", status=BookingStatus.PENDING)

    with pytest.raises(PreconditionFailed):
        apply_transition(booking, BookingStatus.CANCELLED, reason)


def test_cancel_stores_trimmed_reason():
    booking = Booking(id="B1", status=BookingStatus.PENDING)

    cancelled = apply_transition(booking, BookingStatus.CANCELLED, "  Customer unreachable ")

    assert cancelled.status is BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "Customer unreachable"


def test_apply_transition_leaves_input_untouched():
    booking = Booking(id="B2", status=BookingStatus.ONGOING, professional=ProfessionalRef(id="P1"))

    completed = apply_transition(booking, BookingStatus.COMPLETED)

    assert booking.status is BookingStatus.ONGOING
    assert completed.status is BookingStatus.COMPLETED


def test_illegal_transition_checked_before_side_effects():
    booking = Booking(id="B3", status=BookingStatus.COMPLETED, professional=ProfessionalRef(id="P1"))

    with pytest.raises(InvalidTransition):
        apply_transition(booking, BookingStatus.CANCELLED, "")
