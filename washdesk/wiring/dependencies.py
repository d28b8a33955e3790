from functools import lru_cache
import logging

from washdesk.core.config import settings
from washdesk.application.ports.booking_repository import BookingRepositoryPort
from washdesk.application.use_cases.assignment_workflow import AssignmentWorkflowController
from washdesk.application.use_cases.resolve_candidates import ProfessionalAvailabilityResolver
from washdesk.infrastructure.backend.http_repository import HttpBookingRepository
from washdesk.infrastructure.backend.memory_repository import (
    InMemoryBookingRepository,
    build_demo_repository,
)


_controller: AssignmentWorkflowController | None = None


@lru_cache
def get_booking_repository() -> BookingRepositoryPort:
    logger = logging.getLogger(__name__)
    if not settings.BACKEND_BASE_URL or settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using InMemoryBookingRepository (ENV=%s, base URL set=%s)", settings.ENV, bool(settings.BACKEND_BASE_URL))
        if settings.SEED_DEMO_DATA:
            return build_demo_repository()
        return InMemoryBookingRepository()

    logger.info("Using HttpBookingRepository")
    return HttpBookingRepository()


def get_resolver() -> ProfessionalAvailabilityResolver:
    return ProfessionalAvailabilityResolver(
        repository=get_booking_repository(),
        fallback_page_limit=settings.FALLBACK_PAGE_LIMIT,
    )


def get_assignment_controller() -> AssignmentWorkflowController:
    global _controller
    if _controller is None:
        _controller = AssignmentWorkflowController(
            repository=get_booking_repository(),
            resolver=get_resolver(),
        )
    return _controller


async def close_booking_repository() -> None:
    global _controller
    if get_booking_repository.cache_info().currsize == 0:
        return
    repository = get_booking_repository()
    if isinstance(repository, HttpBookingRepository):
        await repository.aclose()
    get_booking_repository.cache_clear()
    _controller = None
