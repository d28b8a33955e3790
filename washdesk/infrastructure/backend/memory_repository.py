from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from washdesk.application.exceptions import BookingNotFound, InvalidTransition, PreconditionFailed, TransportFailure
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.domain.booking_status import apply_transition
from washdesk.domain.entities.booking import Booking, BookingStatus, ProfessionalRef, ServiceLineItem
from washdesk.domain.entities.candidate import coerce_rating, professional_display_name


class InMemoryBookingRepository(BookingRepositoryPort):
    """Local stand-in for the admin backend, used in dev and by the local driver script."""

    def __init__(
        self,
        bookings: list[Booking] | None = None,
        professionals: list[dict[str, Any]] | None = None,
    ) -> None:
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        self._professionals: list[dict[str, Any]] = [dict(p) for p in professionals or []]
        self._failing: set[str] = set()
        self._logger = logging.getLogger(__name__)

    def fail_operation(self, operation: str, failing: bool = True) -> None:
        """Make every call to ``operation`` raise ``TransportFailure`` until switched off."""
        if failing:
            self._failing.add(operation)
        else:
            self._failing.discard(operation)

    async def get_booking_by_id(self, booking_id: str) -> Booking:
        self._check("get_booking_by_id")
        return self._get(booking_id)

    async def get_available_professionals(self, booking_id: str) -> Any:
        self._check("get_available_professionals")
        self._get(booking_id)
        busy = {
            b.professional.id
            for b in self._bookings.values()
            if b.status is BookingStatus.ONGOING and b.professional is not None and b.id != booking_id
        }
        available = [
            p
            for p in self._professionals
            if p.get("isAvailable", True) and p.get("status", "active") == "active" and p.get("_id") not in busy
        ]
        return {"professionals": [dict(p) for p in available]}

    async def get_professionals(self, page: int = 1, limit: int = 50, status: str | None = "active") -> Any:
        self._check("get_professionals")
        matching = [p for p in self._professionals if status is None or p.get("status", "active") == status]
        start = max(page - 1, 0) * limit
        items = [dict(p) for p in matching[start : start + limit]]
        return {"items": items, "page": page, "limit": limit, "total": len(matching)}

    async def assign_professional(self, booking_id: str, professional_id: str) -> Booking:
        self._check("assign_professional")
        booking = self._get(booking_id)
        if booking.is_terminal:
            raise TransportFailure("assign_professional", f"booking is {booking.status.value}", 400)
        raw = next((p for p in self._professionals if p.get("_id") == professional_id), None)
        if raw is None:
            raise TransportFailure("assign_professional", f"professional {professional_id} not found", 404)

        updated = booking.with_changes(
            professional=ProfessionalRef(
                id=professional_id,
                name=professional_display_name(raw),
                phone=str(raw.get("phone") or ""),
                rating=coerce_rating(raw.get("rating")),
            ),
            updated_at=_now(),
        )
        self._bookings[booking_id] = updated
        self._logger.info("Mock professional assigned", extra={"booking_id": booking_id, "candidate_id": professional_id})
        return updated

    async def update_booking_status(self, booking_id: str, status: str) -> Booking:
        self._check("update_booking_status")
        return self._transition("update_booking_status", booking_id, status)

    async def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        self._check("cancel_booking")
        return self._transition("cancel_booking", booking_id, BookingStatus.CANCELLED.value, reason)

    def _transition(self, operation: str, booking_id: str, status: str, reason: str | None = None) -> Booking:
        booking = self._get(booking_id)
        try:
            updated = apply_transition(booking, status, reason)
        except (InvalidTransition, PreconditionFailed, ValueError) as e:
            raise TransportFailure(operation, str(e), 400) from e
        updated = updated.with_changes(updated_at=_now())
        self._bookings[booking_id] = updated
        return updated

    def _get(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def _check(self, operation: str) -> None:
        if operation in self._failing:
            raise TransportFailure(operation, "simulated backend failure", 503)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def build_demo_repository() -> InMemoryBookingRepository:
    now = _now()
    bookings = [
        Booking(
            id="BK-7845",
            status=BookingStatus.PENDING,
            scheduled_at=now + timedelta(days=1),
            services=(ServiceLineItem("Premium Wash", 800.0), ServiceLineItem("Polish", 400.0)),
            total_amount=1416.0,
            address="123 Main Street, Andheri East, Mumbai, Maharashtra 400069",
            customer_id="CUST-1234",
            created_at=now,
            updated_at=now,
        ),
        Booking(
            id="BK-7846",
            status=BookingStatus.PENDING,
            scheduled_at=now + timedelta(days=2),
            services=(ServiceLineItem("Interior Detailing", 1500.0),),
            total_amount=1770.0,
            address="42 Hill Road, Bandra West, Mumbai 400050",
            customer_id="CUST-2210",
            created_at=now,
            updated_at=now,
        ),
    ]
    professionals = [
        {"_id": "PRO-001", "name": "Rajesh Kumar", "rating": 4.8, "specializations": ["Premium Wash", "Polish"]},
        {"_id": "PRO-002", "user": {"name": "Amit Singh"}, "rating": 4.5, "experience": "5 years"},
        {"_id": "PRO-003", "phone": "+91 9876543230", "isAvailable": False},
    ]
    return InMemoryBookingRepository(bookings=bookings, professionals=professionals)
