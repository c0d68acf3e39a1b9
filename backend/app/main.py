"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from app.allocation import HiLoAllocator, SqlHighValueStore
from app.api.v1 import users
from app.core.config import settings
from app.core.errors import AppError, StoreUnavailableError
from app.core.logging import get_logger, setup_logging
from app.db.session import async_session

logger = get_logger(__name__)


def build_allocator(session_factory=async_session) -> HiLoAllocator:
    """HiLo allocator wired to the id_generation table using app settings."""
    return HiLoAllocator(
        SqlHighValueStore(session_factory, initial_high=settings.HILO_INITIAL_HIGH),
        max_lo=settings.HILO_MAX_LO,
        max_attempts=settings.HILO_MAX_CLAIM_ATTEMPTS,
        backoff_base_seconds=settings.HILO_BACKOFF_BASE_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging(settings.effective_log_level, json_logs=settings.LOG_JSON)
    log = get_logger("startup")
    app.state.id_allocator = build_allocator()
    log.info("Application starting", env=settings.APP_ENV, hilo_max_lo=settings.HILO_MAX_LO)
    yield
    log.info("Application shutting down")


app = FastAPI(
    title="HiLo Users API",
    description="User records with table-based HiLo identifier allocation",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> PlainTextResponse:
    """Render domain errors as plain text with the error's status code."""
    logger.warning(
        "Request failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        status_code=exc.status_code,
        details=exc.details,
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(ConnectionError)
async def database_unavailable_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Connectivity failures outside the allocator surface as 503, like the allocator's own."""
    error = StoreUnavailableError(
        "Database unavailable",
        details={"cause": type(exc).__name__, "error": str(exc)},
    )
    return await app_error_handler(request, error)


app.include_router(users.router)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Public health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
