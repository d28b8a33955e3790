class WashdeskError(RuntimeError):
    """Base class for booking workflow errors."""


class TransportFailure(WashdeskError):
    """Raised when a backend call fails (network error, timeout, error status, or no success indicator)."""

    def __init__(self, operation: str, detail: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{operation} failed: {detail}")


class BookingNotFound(TransportFailure):
    """Raised when the backend reports that a booking does not exist."""

    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__("get_booking_by_id", f"booking {booking_id} not found", status_code=404)


class InvalidTransition(WashdeskError):
    """Raised locally when a status change is not allowed. Never reaches the network."""

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid booking transition: {from_status} -> {to_status}")


class PreconditionFailed(WashdeskError):
    """Raised locally when an operation is missing something it needs (reason, selection, professional)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
