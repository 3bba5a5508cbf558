import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from app.core.config import settings
from app.core.errors import BookingError, booking_error_handler, request_validation_handler
from app.core.scheduler import start_scheduler, shutdown_scheduler
from app.api.events import router as events_router
from app.api.bookings import router as bookings_router
from app.api.groups import router as groups_router
from app.api.webhooks import router as webhooks_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up FastAPI...")
    await start_scheduler()
    yield
    await shutdown_scheduler()
    logger.info("Shutting down FastAPI...")


app = FastAPI(
    title="Weekend Match API",
    docs_url="/docs" if not settings.APP_DOMAIN else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_exception_handler(BookingError, booking_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Include routers
app.include_router(events_router)
app.include_router(bookings_router)
app.include_router(groups_router)
app.include_router(webhooks_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
