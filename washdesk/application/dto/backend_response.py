from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BackendEnvelope(BaseModel):
    """Top-level JSON object returned by the admin backend."""

    model_config = ConfigDict(extra="allow")

    success: Any = None
    status: Any = None
    message: Any = None
    data: Any = None
    booking: Any = None

    @property
    def is_success(self) -> bool:
        if self.success is True:
            return True
        return isinstance(self.status, str) and self.status.strip().lower() == "success"

    def extract_booking_payload(self) -> dict[str, Any] | None:
        """Find the booking object under ``data``, ``data.booking``, ``data.data`` or ``booking``."""
        data = self.data
        if isinstance(data, dict):
            if isinstance(data.get("booking"), dict):
                return data["booking"]
            if data.get("_id") or data.get("id"):
                return data
            nested = data.get("data")
            if isinstance(nested, dict):
                if isinstance(nested.get("booking"), dict):
                    return nested["booking"]
                if nested.get("_id") or nested.get("id"):
                    return nested
        if isinstance(self.booking, dict) and (self.booking.get("_id") or self.booking.get("id")):
            return self.booking
        return None
