"""Application-wide exception handlers."""

import uuid
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from reelshelf.services.error_tracking import error_tracker
from reelshelf.services.errors import ServiceError
from reelshelf.services.logging_service import logger


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a domain error as {"detail": message} with its mapped status."""
    if exc.status_code >= 500:
        logger.error(
            "Service error",
            error_type=type(exc).__name__,
            error=exc.message,
            method=request.method,
            path=request.url.path
        )

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler for unexpected exceptions.

    Logs the traceback, reports to Sentry when enabled, and hides the
    internals behind a generic message and an error id.
    """
    error_id = uuid.uuid4().hex[:12]

    logger.exception(
        "Unhandled exception",
        error_id=error_id,
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path
    )
    error_tracker.capture_exception(
        exc,
        context={"request": {"method": request.method, "path": request.url.path}},
        tags={"error_id": error_id}
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_id": error_id}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on an application."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
