from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from washdesk.domain.entities.booking import Booking


class BookingRepositoryPort(ABC):
    """Request/response access to the booking backend. Implementations never retry.

    Every method raises ``TransportFailure`` when the call fails or the
    response carries no recognizable success indicator.
    """

    @abstractmethod
    async def get_booking_by_id(self, booking_id: str) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def get_available_professionals(self, booking_id: str) -> Any:
        """Booking-scoped lookup. Returns the raw payload; its shape varies."""
        raise NotImplementedError

    @abstractmethod
    async def get_professionals(self, page: int = 1, limit: int = 50, status: str | None = "active") -> Any:
        """Paginated professional listing. Returns the raw payload; its shape varies."""
        raise NotImplementedError

    @abstractmethod
    async def assign_professional(self, booking_id: str, professional_id: str) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def update_booking_status(self, booking_id: str, status: str) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        raise NotImplementedError
