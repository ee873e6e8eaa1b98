"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursesapi.api.dependencies import close_registry, init_registry
from coursesapi.api.models import APIResponse
from coursesapi.api.routes import courses, students, templates
from coursesapi.config import DEFAULT_DB_PATH, DEFAULT_SEMESTER, Settings
from coursesapi.logging import get_logger, setup_logging
from coursesapi.registry import (
    AlreadyEnrolledError,
    AlreadyWaitlistedError,
    CourseFullError,
    CourseNotFoundError,
    InvalidCourseError,
    NotEnrolledError,
    RegistryError,
    StudentExistsError,
    StudentNotFoundError,
    TemplateExistsError,
    TemplateNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

logger = get_logger("api")

# Rule violations answer 412 Precondition Failed; lookups of missing records 404.
ERROR_STATUS: dict[type[RegistryError], int] = {
    CourseNotFoundError: status.HTTP_404_NOT_FOUND,
    StudentNotFoundError: status.HTTP_404_NOT_FOUND,
    TemplateNotFoundError: status.HTTP_404_NOT_FOUND,
    CourseFullError: status.HTTP_412_PRECONDITION_FAILED,
    AlreadyEnrolledError: status.HTTP_412_PRECONDITION_FAILED,
    AlreadyWaitlistedError: status.HTTP_412_PRECONDITION_FAILED,
    NotEnrolledError: status.HTTP_412_PRECONDITION_FAILED,
    InvalidCourseError: status.HTTP_412_PRECONDITION_FAILED,
    StudentExistsError: status.HTTP_409_CONFLICT,
    TemplateExistsError: status.HTTP_409_CONFLICT,
}


def _error_handler(status_code: int) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handler(_request: Request, exc: Exception) -> JSONResponse:
        message = str(exc) or HTTPStatus(status_code).phrase
        return JSONResponse(
            status_code=status_code,
            content=APIResponse[None](data=None, error=message).model_dump(),
        )

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """Map registry errors to HTTP responses.

    The error text is the exception message, which names the offending ids.
    Any RegistryError without its own entry becomes a 500.
    """
    for exc_type, status_code in ERROR_STATUS.items():
        app.add_exception_handler(exc_type, _error_handler(status_code))

    @app.exception_handler(RegistryError)
    async def registry_error_handler(_request: Request, exc: RegistryError) -> JSONResponse:
        logger.error("Unhandled registry error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    db_path = app.state.db_path if hasattr(app.state, "db_path") else DEFAULT_DB_PATH
    init_registry(db_path)
    logger.info("Course registry opened at %s", db_path)
    yield
    close_registry()


def create_app(
    db_path: str = DEFAULT_DB_PATH, default_semester: str = DEFAULT_SEMESTER
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Courses API",
        description="REST API for course enrollment and waiting lists",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager and routes
    app.state.db_path = db_path
    app.state.default_semester = default_semester

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(templates.router, prefix="/api/v1")

    return app


def main() -> None:
    """Serve the API with settings taken from the environment."""
    settings = Settings.from_env()
    uvicorn.run(
        create_app(settings.db_path, settings.default_semester),
        host=settings.host,
        port=settings.port,
    )


# Default app instance
app = create_app()
