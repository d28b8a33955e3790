from datetime import datetime
from pydantic import BaseModel, Field


class ProfessionalSchema(BaseModel):
    id: str
    name: str
    phone: str = ""
    rating: float = 0.0


class ServiceLineSchema(BaseModel):
    name: str
    price: float = 0.0


class BookingSchema(BaseModel):
    id: str
    status: str
    scheduled_at: datetime | None = None
    services: list[ServiceLineSchema] = Field(default_factory=list)
    total_amount: float = 0.0
    payment_status: str = "pending"
    address: str = ""
    customer_id: str | None = None
    professional: ProfessionalSchema | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CandidateSchema(BaseModel):
    id: str
    name: str
    rating: float = 0.0
    experience: str = ""
    availability: bool = True
    source: str


class InteractionSchema(BaseModel):
    booking_id: str
    phase: str
    outcome: str | None = None
    candidates: list[CandidateSchema] = Field(default_factory=list)
    selected_candidate_id: str | None = None
    in_flight: bool = False
    last_error: str | None = None


class StatusUpdateRequestSchema(BaseModel):
    status: str


class CancelRequestSchema(BaseModel):
    reason: str = ""


class SelectRequestSchema(BaseModel):
    candidate_id: str


class SelectResponseSchema(BaseModel):
    selected: bool
    interaction: InteractionSchema


class CommitResponseSchema(BaseModel):
    status: str
    booking: BookingSchema
