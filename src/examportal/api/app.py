"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import replace
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examportal.api.dependencies import (
    close_broadcaster,
    close_coordinator,
    close_event_manager,
    close_store,
    init_broadcaster,
    init_coordinator,
    init_event_manager,
    init_store,
)
from examportal.api.events import audit_listener
from examportal.api.models import APIResponse
from examportal.api.routes import (
    audit,
    courses,
    events,
    exams,
    hall_tickets,
    notifications,
    payments,
    registrations,
    students,
)
from examportal.config import Settings
from examportal.logging import get_logger, setup_logging
from examportal.notifications import (
    ConfirmationNotifier,
    DispatchFailedError,
    LogDispatcher,
    MailRelayDispatcher,
    NotificationBroadcaster,
)
from examportal.registration import (
    HallTicketIssuer,
    RegistrationCoordinator,
    RegistrationNotFoundError,
    RegistrationProcessingError,
)
from examportal.store import (
    CourseExistsError,
    CourseNotFoundError,
    ExamNotFoundError,
    HallTicketNotFoundError,
    PortalStoreError,
    StudentExistsError,
    StudentInUseError,
    StudentNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from examportal.notifications import NotificationDispatcher

logger = get_logger("api")


def _build_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Mail relay dispatcher when configured, log-only otherwise."""
    if settings.mail_relay_url:
        return MailRelayDispatcher(
            relay_url=settings.mail_relay_url,
            token=settings.mail_relay_token,
            sender=settings.mail_sender,
        )
    logger.info("No mail relay configured, confirmations will only be logged")
    return LogDispatcher()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    store = init_store(settings.db_path, busy_timeout=settings.busy_timeout)
    event_manager = init_event_manager()
    event_manager.add_listener(audit_listener(store))

    dispatcher = _build_dispatcher(settings)
    notifier = ConfirmationNotifier(dispatcher, institution=settings.institution)
    coordinator = RegistrationCoordinator(
        database=store.database,
        notifier=notifier,
        event_manager=event_manager,
        issuer=HallTicketIssuer(settings.ticket_base_url),
        timeout=settings.registration_timeout,
    )
    init_coordinator(coordinator)
    init_broadcaster(NotificationBroadcaster(dispatcher, institution=settings.institution))
    logger.info("Exam portal started with database %s", settings.db_path)

    yield
    # Shutdown
    close_broadcaster()
    close_coordinator()
    close_event_manager()
    close_store()
    if isinstance(dispatcher, MailRelayDispatcher):
        dispatcher.close()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


def create_app(db_path: str | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings.from_env()
    if db_path is not None:
        settings = replace(settings, db_path=db_path)

    app = FastAPI(
        title="Exam Portal API",
        description="REST API for exam registration, payment and hall tickets",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(StudentNotFoundError)
    async def student_not_found_handler(
        _request: Request, _exc: StudentNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Student not found")

    @app.exception_handler(CourseNotFoundError)
    async def course_not_found_handler(
        _request: Request, _exc: CourseNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Course not found")

    @app.exception_handler(ExamNotFoundError)
    async def exam_not_found_handler(_request: Request, _exc: ExamNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Exam not found")

    @app.exception_handler(HallTicketNotFoundError)
    async def hall_ticket_not_found_handler(
        _request: Request, _exc: HallTicketNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Hall ticket not found")

    @app.exception_handler(RegistrationNotFoundError)
    async def registration_not_found_handler(
        _request: Request, _exc: RegistrationNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Paid registration not found")

    @app.exception_handler(StudentExistsError)
    async def student_exists_handler(_request: Request, _exc: StudentExistsError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "Student number or email already exists")

    @app.exception_handler(CourseExistsError)
    async def course_exists_handler(_request: Request, _exc: CourseExistsError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "Course with this code already exists")

    @app.exception_handler(StudentInUseError)
    async def student_in_use_handler(_request: Request, _exc: StudentInUseError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "Student has registrations and cannot be deleted")

    @app.exception_handler(DispatchFailedError)
    async def dispatch_failed_handler(
        _request: Request, _exc: DispatchFailedError
    ) -> JSONResponse:
        return _error(status.HTTP_502_BAD_GATEWAY, "Could not send confirmation email")

    @app.exception_handler(RegistrationProcessingError)
    async def registration_processing_handler(
        _request: Request, _exc: RegistrationProcessingError
    ) -> JSONResponse:
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An error occurred while processing your registration, please try again",
        )

    @app.exception_handler(PortalStoreError)
    async def portal_store_error_handler(
        _request: Request, _exc: PortalStoreError
    ) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Include routers
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(exams.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(hall_tickets.router, prefix="/api/v1")
    app.include_router(payments.router, prefix="/api/v1")
    app.include_router(notifications.router, prefix="/api/v1")
    app.include_router(audit.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app


def main() -> None:
    """Run the API server."""
    import uvicorn  # noqa: PLC0415

    setup_logging()
    settings = Settings.from_env()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


# Default app instance
app = create_app()
