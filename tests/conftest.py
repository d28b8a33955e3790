from __future__ import annotations

import pytest

from washdesk.application.use_cases.assignment_workflow import AssignmentWorkflowController
from washdesk.application.use_cases.resolve_candidates import ProfessionalAvailabilityResolver
from washdesk.domain.entities.booking import Booking, BookingStatus, ProfessionalRef
from tests.fakes import FakeBookingRepository


@pytest.fixture
def bookings() -> list[Booking]:
    return [
        Booking(id="B1", status=BookingStatus.PENDING, total_amount=1200.0),
        Booking(
            id="B2",
            status=BookingStatus.ONGOING,
            professional=ProfessionalRef(id="P9", name="Rajesh Kumar"),
        ),
        Booking(
            id="B3",
            status=BookingStatus.COMPLETED,
            professional=ProfessionalRef(id="P9", name="Rajesh Kumar"),
        ),
        Booking(id="B4", status=BookingStatus.PENDING),
    ]


@pytest.fixture
def repository(bookings: list[Booking]) -> FakeBookingRepository:
    return FakeBookingRepository(bookings=bookings)


@pytest.fixture
def resolver(repository: FakeBookingRepository) -> ProfessionalAvailabilityResolver:
    return ProfessionalAvailabilityResolver(repository, fallback_page_limit=50)


@pytest.fixture
def controller(
    repository: FakeBookingRepository,
    resolver: ProfessionalAvailabilityResolver,
    bookings: list[Booking],
) -> AssignmentWorkflowController:
    controller = AssignmentWorkflowController(repository=repository, resolver=resolver)
    for booking in bookings:
        controller.register(booking)
    return controller
