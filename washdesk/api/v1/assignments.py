from fastapi import APIRouter, Depends, HTTPException
from washdesk.api.v1.schemas import (
    BookingSchema, ProfessionalSchema, ServiceLineSchema,
    CandidateSchema, InteractionSchema,
    StatusUpdateRequestSchema, CancelRequestSchema,
    SelectRequestSchema, SelectResponseSchema, CommitResponseSchema,
)
from washdesk.wiring.dependencies import get_assignment_controller
from washdesk.application.use_cases.assignment_workflow import AssignmentWorkflowController, CommitStatus
from washdesk.application.exceptions import (
    BookingNotFound, InvalidTransition, PreconditionFailed, TransportFailure,
)
from washdesk.domain.entities.assignment import AssignmentInteraction
from washdesk.domain.entities.booking import Booking

router = APIRouter()


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
async def get_booking(
    booking_id: str,
    controller: AssignmentWorkflowController = Depends(get_assignment_controller),
):
    try:
        booking = await controller.load_booking(booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _booking_schema(booking)


@router.patch("/bookings/{booking_id}/status", response_model=BookingSchema)
async def update_status(
    booking_id: str,
    req: StatusUpdateRequestSchema,
    controller: AssignmentWorkflowController = Depends(get_assignment_controller),
):
    try:
        booking = await controller.update_booking_status(booking_id, req.status)
    except PreconditionFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _booking_schema(booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingSchema)
async def cancel_booking(
    booking_id: str,
    req: CancelRequestSchema,
    controller: AssignmentWorkflowController = Depends(get_assignment_controller),
):
    try:
        booking = await controller.cancel_booking(booking_id, req.reason)
    except PreconditionFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _booking_schema(booking)


@router.post("/bookings/{booking_id}/assignment", response_model=InteractionSchema)
async def open_assignment(
    booking_id: str,
    controller: AssignmentWorkflowController = Depends(get_assignment_controller),
):
    interaction = await controller.open(booking_id)
    return _interaction_schema(interaction)


@router.get("/assignment", response_model=InteractionSchema)
def get_assignment(controller: AssignmentWorkflowController = Depends(get_assignment_controller)):
    interaction = controller.interaction
    if interaction is None:
        raise HTTPException(status_code=404, detail="No assignment interaction is open.")
    return _interaction_schema(interaction)


@router.post("/assignment/select", response_model=SelectResponseSchema)
def select_candidate(
    req: SelectRequestSchema,
    controller: AssignmentWorkflowController = Depends(get_assignment_controller),
):
    selected = controller.select(req.candidate_id)
    interaction = controller.interaction
    if interaction is None:
        raise HTTPException(status_code=404, detail="No assignment interaction is open.")
    return SelectResponseSchema(selected=selected, interaction=_interaction_schema(interaction))


@router.post("/assignment/retry", response_model=InteractionSchema)
async def retry_assignment(controller: AssignmentWorkflowController = Depends(get_assignment_controller)):
    try:
        interaction = await controller.retry()
    except PreconditionFailed as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _interaction_schema(interaction)


@router.post("/assignment/commit", response_model=CommitResponseSchema)
async def commit_assignment(controller: AssignmentWorkflowController = Depends(get_assignment_controller)):
    result = await controller.commit()
    if result.status is CommitStatus.PRECONDITION_FAILED:
        raise HTTPException(status_code=400, detail=str(result.error))
    if result.status is CommitStatus.SKIPPED:
        raise HTTPException(status_code=409, detail="An assignment commit is already in flight.")
    if result.status is CommitStatus.FAILED:
        raise HTTPException(status_code=502, detail=str(result.error))
    return CommitResponseSchema(status=result.status.value, booking=_booking_schema(result.booking))


@router.delete("/assignment", status_code=204)
def close_assignment(controller: AssignmentWorkflowController = Depends(get_assignment_controller)):
    controller.close()


def _booking_schema(booking: Booking) -> BookingSchema:
    return BookingSchema(
        id=booking.id,
        status=booking.status.value,
        scheduled_at=booking.scheduled_at,
        services=[ServiceLineSchema(name=s.name, price=s.price) for s in booking.services],
        total_amount=booking.total_amount,
        payment_status=booking.payment_status.value,
        address=booking.address,
        customer_id=booking.customer_id,
        professional=(
            ProfessionalSchema(
                id=booking.professional.id,
                name=booking.professional.name,
                phone=booking.professional.phone,
                rating=booking.professional.rating,
            )
            if booking.professional else None
        ),
        cancellation_reason=booking.cancellation_reason,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def _interaction_schema(interaction: AssignmentInteraction) -> InteractionSchema:
    return InteractionSchema(
        booking_id=interaction.booking_id,
        phase=interaction.phase.value,
        outcome=interaction.outcome.value if interaction.outcome else None,
        candidates=[
            CandidateSchema(
                id=c.id,
                name=c.name,
                rating=c.rating,
                experience=c.experience,
                availability=c.availability,
                source=c.source.value,
            )
            for c in interaction.candidates
        ],
        selected_candidate_id=interaction.selected_candidate_id,
        in_flight=interaction.in_flight,
        last_error=str(interaction.last_error) if interaction.last_error else None,
    )
