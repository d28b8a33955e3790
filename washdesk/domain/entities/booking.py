"""
Booking record as tracked by the admin console.

Backend booking payloads drift between endpoints and API versions (``_id`` vs
``id``, ``location`` vs ``address``, a ``services`` list vs a single
``service`` object). ``Booking.from_payload`` folds all of them into one
frozen record so the workflow code never looks at raw dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from washdesk.domain.entities.candidate import (
    UNKNOWN_PROFESSIONAL_NAME,
    coerce_rating,
    professional_display_name,
)

# Backend records can arrive cancelled without a reason (older clients never sent one).
UNSPECIFIED_CANCELLATION_REASON = "Not specified"


class BookingStatus(str, Enum):
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        if isinstance(value, BookingStatus):
            return value
        normalized = str(value or "").strip().lower()
        normalized = _STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown booking status: {value!r}") from None

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


_STATUS_ALIASES = {
    "confirmed": "pending",
    "assigned": "ongoing",
    "in_progress": "ongoing",
    "in-progress": "ongoing",
    "started": "ongoing",
    "canceled": "cancelled",
}


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Any) -> "PaymentStatus":
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.PENDING


@dataclass(frozen=True)
class ServiceLineItem:
    name: str
    price: float = 0.0


@dataclass(frozen=True)
class ProfessionalRef:
    id: str
    name: str = UNKNOWN_PROFESSIONAL_NAME
    phone: str = ""
    rating: float = 0.0


@dataclass(frozen=True)
class Booking:
    id: str
    status: BookingStatus = BookingStatus.PENDING
    scheduled_at: datetime | None = None
    services: tuple[ServiceLineItem, ...] = ()
    total_amount: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    address: str = ""
    customer_id: str | None = None
    professional: ProfessionalRef | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.status is BookingStatus.CANCELLED and not self.cancellation_reason:
            raise ValueError(f"Cancelled booking {self.id} must carry a cancellation reason.")
        if self.status is not BookingStatus.CANCELLED and self.cancellation_reason is not None:
            raise ValueError(f"Booking {self.id} is {self.status.value} but has a cancellation reason.")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_assigned(self) -> bool:
        return self.professional is not None

    def with_changes(self, **changes: Any) -> "Booking":
        return replace(self, **changes)

    @staticmethod
    def from_payload(raw: dict[str, Any]) -> "Booking":
        if not isinstance(raw, dict):
            raise ValueError("Booking payload must be an object.")

        booking_id = raw.get("_id") or raw.get("id")
        if not booking_id:
            raise ValueError("Booking payload has no id.")

        status = BookingStatus.parse(raw.get("status"))
        reason = _clean_text(
            raw.get("cancellationReason") or raw.get("cancelReason") or raw.get("cancellation_reason")
        )
        if status is BookingStatus.CANCELLED:
            reason = reason or UNSPECIFIED_CANCELLATION_REASON
        else:
            reason = None

        return Booking(
            id=str(booking_id),
            status=status,
            scheduled_at=_parse_datetime(
                raw.get("scheduledDateTime") or raw.get("scheduledAt") or raw.get("scheduledDate")
            ),
            services=_parse_services(raw),
            total_amount=_parse_total(raw),
            payment_status=PaymentStatus.parse(raw.get("paymentStatus")),
            address=_parse_address(raw.get("address") or raw.get("location")),
            customer_id=_parse_customer_id(raw),
            professional=_parse_professional(raw),
            cancellation_reason=reason,
            created_at=_parse_datetime(raw.get("createdAt")),
            updated_at=_parse_datetime(raw.get("updatedAt")),
        )


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_services(raw: dict[str, Any]) -> tuple[ServiceLineItem, ...]:
    items: list[ServiceLineItem] = []
    entries = raw.get("services")
    if isinstance(entries, list):
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            ref = entry.get("serviceId") if isinstance(entry.get("serviceId"), dict) else {}
            name = entry.get("title") or entry.get("name") or ref.get("title") or ref.get("name") or "Service"
            price = entry.get("price") if entry.get("price") is not None else ref.get("price")
            items.append(ServiceLineItem(name=str(name), price=_coerce_amount(price)))
    elif isinstance(raw.get("service"), dict):
        service = raw["service"]
        price = service.get("basePrice") if service.get("basePrice") is not None else service.get("price")
        items.append(
            ServiceLineItem(
                name=str(service.get("name") or service.get("title") or "Service"),
                price=_coerce_amount(price),
            )
        )
    return tuple(items)


def _parse_total(raw: dict[str, Any]) -> float:
    for key in ("totalAmount", "totalPrice", "amount"):
        if raw.get(key) is not None:
            return _coerce_amount(raw.get(key))
    return 0.0


def _parse_address(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if not isinstance(value, dict):
        return ""
    parts = []
    for key in ("addressLine1", "address", "landmark", "city", "state", "postalCode", "pincode"):
        part = value.get(key)
        if isinstance(part, str) and part.strip():
            parts.append(part.strip())
    return ", ".join(parts)


def _parse_customer_id(raw: dict[str, Any]) -> str | None:
    customer = raw.get("customer")
    if isinstance(customer, dict):
        customer = customer.get("_id") or customer.get("id")
    if not customer:
        customer = raw.get("customerId")
    return str(customer) if customer else None


def _parse_professional(raw: dict[str, Any]) -> ProfessionalRef | None:
    professional = raw.get("professional")
    if isinstance(professional, str) and professional.strip():
        return ProfessionalRef(id=professional.strip())
    if isinstance(professional, dict):
        user = professional.get("user") if isinstance(professional.get("user"), dict) else {}
        professional_id = professional.get("_id") or professional.get("id") or user.get("_id") or user.get("id")
        if not professional_id:
            return None
        return ProfessionalRef(
            id=str(professional_id),
            name=professional_display_name(professional),
            phone=str(professional.get("phone") or user.get("phone") or ""),
            rating=coerce_rating(professional.get("rating")),
        )
    if raw.get("professionalId"):
        return ProfessionalRef(
            id=str(raw["professionalId"]),
            name=_clean_text(raw.get("professionalName")) or UNKNOWN_PROFESSIONAL_NAME,
            phone=str(raw.get("professionalPhone") or ""),
        )
    return None
