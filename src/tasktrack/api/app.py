"""
FastAPI application setup for tasktrack.

Creates the FastAPI app, registers routes and error handlers, and owns the
lifetime of the daily reminder scheduler.
"""

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasktrack import __version__
from tasktrack.api.routes import projects, reminders, tasks, users
from tasktrack.core.config.loader import load_config
from tasktrack.core.config.models import TrackerConfig
from tasktrack.core.exceptions import (
    DuplicateKeyError,
    InvalidCredentialsError,
    RecordNotFoundError,
    RecordValidationError,
    StorageError,
    TrackerError,
)
from tasktrack.core.reminders.job import ReminderJob
from tasktrack.core.reminders.mailer import MailTransport
from tasktrack.core.reminders.scheduler import DailyScheduler

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Server errors (5xx)
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error_code: ErrorCode
    message: str
    detail: str | None = None
    request_id: str | None = None


# Tracker exceptions -> (HTTP status, error code); first match wins
TRACKER_ERROR_STATUS: list[tuple[type[TrackerError], int, ErrorCode]] = [
    (RecordValidationError, status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION_ERROR),
    (DuplicateKeyError, status.HTTP_400_BAD_REQUEST, ErrorCode.DUPLICATE_KEY),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED, ErrorCode.INVALID_CREDENTIALS),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.DATABASE_ERROR),
]


def _error_body(
    request: Request, error_code: ErrorCode, message: str, detail: str | None = None
) -> dict[str, str | None]:
    return ErrorResponse(
        error_code=error_code,
        message=message,
        detail=detail if detail is not None else message,
        request_id=str(id(request)),
    ).model_dump(mode="json")


def _log_http_error(request: Request, status_code: int, detail: object) -> None:
    if status_code >= 500:
        log = logger.error
    else:
        log = logger.info
    log(
        "HTTP %d on %s %s: %s",
        status_code,
        request.method,
        request.url.path,
        detail,
        extra={"request_id": id(request)},
    )


async def tracker_exception_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Map tracker exceptions to their HTTP status and error code."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = ErrorCode.INTERNAL_ERROR
    for exc_type, mapped_status, mapped_code in TRACKER_ERROR_STATUS:
        if isinstance(exc, exc_type):
            http_status, error_code = mapped_status, mapped_code
            break

    _log_http_error(request, http_status, exc.message)

    message = exc.message
    if http_status >= 500:
        # Don't leak SQL details to clients
        message = "Database operation failed"

    return JSONResponse(
        status_code=http_status,
        content=_error_body(request, error_code, message),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException with the standard error body."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code = ErrorCode.NOT_FOUND
    elif exc.status_code < 500:
        error_code = ErrorCode.INVALID_REQUEST
    else:
        error_code = ErrorCode.INTERNAL_ERROR

    _log_http_error(request, exc.status_code, exc.detail)

    detail_msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, error_code, detail_msg),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle validation errors from request bodies and query parameters.

    Missing or malformed fields are client errors and answer 400.
    """
    logger.info(
        "Validation error on %s %s: %s",
        request.method,
        request.url.path,
        exc.errors(),
        extra={"request_id": id(request)},
    )

    first_error = exc.errors()[0] if exc.errors() else {}
    field = " -> ".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
    error_msg = first_error.get("msg", "Invalid input")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            request,
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            f"{field}: {error_msg}" if field else error_msg,
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all uncaught exceptions.

    Logs the full traceback but returns a clean body without internals.
    """
    logger.error(
        "Unhandled exception on %s %s: %s\n%s",
        request.method,
        request.url.path,
        str(exc),
        traceback.format_exc(),
        extra={"request_id": id(request)},
    )

    error_code = ErrorCode.INTERNAL_ERROR
    error_message = "An internal server error occurred"
    exc_str = str(exc).lower()
    if "database" in exc_str or "sqlite" in exc_str:
        error_code = ErrorCode.DATABASE_ERROR
        error_message = "Database operation failed"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, error_code, error_message, str(exc)),
    )


def create_app(
    config: TrackerConfig | None = None,
    *,
    db_path: Path | str | None = None,
    transport: MailTransport | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Configuration; loaded from files and environment when omitted
        db_path: Database file; defaults to config.database.path
        transport: Mail transport for the reminder job; SMTP when omitted
        start_scheduler: Run the daily scheduler while the app is up;
            defaults to config.reminder.enabled

    Returns:
        Configured FastAPI app
    """
    config = config or load_config()
    resolved_db = Path(db_path or config.database.path)
    reminder_job = ReminderJob(config, db_path=resolved_db, transport=transport)
    run_scheduler = config.reminder.enabled if start_scheduler is None else start_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler: DailyScheduler | None = None
        if run_scheduler:
            scheduler = DailyScheduler(reminder_job.run, config.reminder)
            scheduler.start()
        app.state.scheduler = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()

    app = FastAPI(
        title="tasktrack API",
        description="REST API for users, projects and tasks with a daily deadline digest",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.db_path = resolved_db
    app.state.reminder_job = reminder_job
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(projects.router, prefix="/api", tags=["projects"])
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])
    app.include_router(reminders.router, tags=["reminders"])

    app.add_exception_handler(TrackerError, tracker_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        StarletteHTTPException, http_exception_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        RequestValidationError, validation_exception_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint - API health check."""
        return {"status": "ok", "message": "tasktrack API"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app
