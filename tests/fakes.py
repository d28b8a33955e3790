"""
Scripted booking repository for workflow tests.

Every call is recorded in ``calls``. Responses come from, in order:
``failures`` (raise), the per-operation ``scripted`` queue, then defaults
(``available`` / ``listing`` payloads, or a booking derived from
``bookings``). ``gates`` hold every call to an operation until the event is
set; a ``Held`` entry in a script holds just that one call.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from washdesk.application.exceptions import BookingNotFound
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.domain.booking_status import apply_transition
from washdesk.domain.entities.booking import Booking, BookingStatus, ProfessionalRef

_MISSING = object()


@dataclass
class Held:
    gate: asyncio.Event
    value: Any


class FakeBookingRepository(BookingRepositoryPort):
    def __init__(
        self,
        bookings: list[Booking] | None = None,
        available: Any = None,
        listing: Any = None,
    ) -> None:
        self.bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        self.available: Any = available if available is not None else []
        self.listing: Any = listing if listing is not None else []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.scripted: dict[str, list[Any]] = {}
        self.calls: list[tuple[Any, ...]] = []

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def get_booking_by_id(self, booking_id: str) -> Booking:
        result = await self._invoke("get_booking_by_id", booking_id)
        if result is not _MISSING:
            return result
        if booking_id not in self.bookings:
            raise BookingNotFound(booking_id)
        return self.bookings[booking_id]

    async def get_available_professionals(self, booking_id: str) -> Any:
        result = await self._invoke("get_available_professionals", booking_id)
        return self.available if result is _MISSING else result

    async def get_professionals(self, page: int = 1, limit: int = 50, status: str | None = "active") -> Any:
        result = await self._invoke("get_professionals", page, limit, status)
        return self.listing if result is _MISSING else result

    async def assign_professional(self, booking_id: str, professional_id: str) -> Booking:
        result = await self._invoke("assign_professional", booking_id, professional_id)
        if result is not _MISSING:
            return result
        booking = self.bookings[booking_id].with_changes(professional=ProfessionalRef(id=professional_id))
        self.bookings[booking_id] = booking
        return booking

    async def update_booking_status(self, booking_id: str, status: str) -> Booking:
        result = await self._invoke("update_booking_status", booking_id, status)
        if result is not _MISSING:
            return result
        booking = apply_transition(self.bookings[booking_id], status)
        self.bookings[booking_id] = booking
        return booking

    async def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        result = await self._invoke("cancel_booking", booking_id, reason)
        if result is not _MISSING:
            return result
        booking = apply_transition(self.bookings[booking_id], BookingStatus.CANCELLED, reason)
        self.bookings[booking_id] = booking
        return booking

    async def _invoke(self, operation: str, *args: Any) -> Any:
        self.calls.append((operation, *args))
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()

        queue = self.scripted.get(operation)
        item = queue.pop(0) if queue else _MISSING
        if isinstance(item, Held):
            await item.gate.wait()
            item = item.value

        if operation in self.failures:
            raise self.failures[operation]
        if isinstance(item, Exception):
            raise item
        return item
