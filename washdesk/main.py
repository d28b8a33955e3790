import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from washdesk.api.v1.assignments import router as assignments_router
from washdesk.core.config import settings
from washdesk.wiring.dependencies import close_booking_repository

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "candidate_id", "operation", "path", "source", "status", "outcome", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_booking_repository()
    logging.getLogger(__name__).info("Booking repository closed")


app = FastAPI(title="Washdesk Booking Assignment", version="1.0.0", lifespan=lifespan)

app.include_router(assignments_router, prefix="/api/v1", tags=["assignments"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
