from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from washdesk.application.dto.backend_response import BackendEnvelope
from washdesk.application.exceptions import BookingNotFound, TransportFailure
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.core.config import settings
from washdesk.domain.entities.booking import Booking


class HttpBookingRepository(BookingRepositoryPort):
    """Admin backend client. One request per call; failures are raised as ``TransportFailure``."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url or settings.BACKEND_BASE_URL
        self._api_token = api_token or settings.BACKEND_API_TOKEN
        if not self._base_url and http is None:
            raise ValueError("BACKEND_BASE_URL is required for the HTTP booking repository")
        self._http = http or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or settings.BACKEND_TIMEOUT_SECONDS,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_booking_by_id(self, booking_id: str) -> Booking:
        try:
            envelope = await self._call("get_booking_by_id", "GET", f"/admins/bookings/{booking_id}")
        except TransportFailure as e:
            if e.status_code == 404:
                raise BookingNotFound(booking_id) from e
            raise
        return self._booking_from(envelope, "get_booking_by_id")

    async def get_available_professionals(self, booking_id: str) -> Any:
        envelope = await self._call(
            "get_available_professionals",
            "GET",
            f"/admins/bookings/{booking_id}/available-professionals",
        )
        return envelope.data

    async def get_professionals(self, page: int = 1, limit: int = 50, status: str | None = "active") -> Any:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        envelope = await self._call("get_professionals", "GET", "/admins/professionals", params=params)
        return envelope.data

    async def assign_professional(self, booking_id: str, professional_id: str) -> Booking:
        envelope = await self._call(
            "assign_professional",
            "PATCH",
            f"/admins/bookings/{booking_id}/assign-professional",
            json={"professionalId": professional_id},
        )
        return self._booking_from(envelope, "assign_professional")

    async def update_booking_status(self, booking_id: str, status: str) -> Booking:
        envelope = await self._call(
            "update_booking_status",
            "PATCH",
            f"/admins/bookings/{booking_id}/status",
            json={"status": status},
        )
        return self._booking_from(envelope, "update_booking_status")

    async def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        envelope = await self._call(
            "cancel_booking",
            "PATCH",
            f"/admins/bookings/{booking_id}/cancel",
            json={"reason": reason},
        )
        return self._booking_from(envelope, "cancel_booking")

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> BackendEnvelope:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportFailure(operation, f"request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise TransportFailure(operation, f"connection failed: {e}") from e

        if response.status_code >= 400:
            self._logger.warning(
                "Backend request failed",
                extra={"operation": operation, "status": response.status_code, "path": path},
            )
            raise TransportFailure(operation, f"backend returned {response.status_code}", response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise TransportFailure(operation, "response is not JSON", response.status_code) from e
        if not isinstance(body, dict):
            raise TransportFailure(operation, "response has no success indicator", response.status_code)

        try:
            envelope = BackendEnvelope.model_validate(body)
        except ValidationError as e:
            raise TransportFailure(operation, f"malformed response: {e}", response.status_code) from e

        if not envelope.is_success:
            raise TransportFailure(
                operation,
                str(envelope.message or "response has no success indicator"),
                response.status_code,
            )
        return envelope

    def _booking_from(self, envelope: BackendEnvelope, operation: str) -> Booking:
        payload = envelope.extract_booking_payload()
        if payload is None:
            raise TransportFailure(operation, "response carries no booking")
        try:
            return Booking.from_payload(payload)
        except ValueError as e:
            raise TransportFailure(operation, f"unreadable booking: {e}") from e
