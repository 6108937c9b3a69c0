"""Middleware for the FastAPI application.

This module provides CORS, request logging and the mapping of core
exceptions onto HTTP status codes.
"""

import logging
import time
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, status  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse, Response  # type: ignore[import-untyped]

from work_hours.core.config import ConfigManager
from work_hours.core.exceptions import (
    ConflictError,
    InvalidEntryError,
    NotAuthorizedError,
    NotFoundError,
    UnauthenticatedError,
    WorkHoursError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first matching class wins
ERROR_STATUS: list[tuple[type[WorkHoursError], int, str]] = [
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED, "unauthenticated"),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN, "not_authorized"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (ConflictError, status.HTTP_409_CONFLICT, "conflict"),
    (InvalidEntryError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_entry"),
]


def error_status(exc: WorkHoursError) -> tuple[int, str]:
    """HTTP status and error code for a core exception."""
    for exc_type, status_code, error_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, error_code
    return status.HTTP_400_BAD_REQUEST, "bad_request"


async def handle_work_hours_error(request: Request, exc: WorkHoursError) -> JSONResponse:
    """Render a core exception as an ``ErrorResponse`` body."""
    status_code, error_code = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_code": error_code},
    )


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        CORS is configured based on the api.cors section in config.
        By default, only localhost origins are allowed.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI) -> None:
    """Log method, path, status and latency of every request."""

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms)"
        )
        return response


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware for the application.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        This function configures:
        - CORS middleware
        - Request logging
        - Exception handlers for core errors
    """
    setup_cors(app, config)
    setup_request_logging(app)
    app.add_exception_handler(WorkHoursError, handle_work_hours_error)
