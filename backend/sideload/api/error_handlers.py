"""Error Handlers: global exception handlers for host FastAPI applications.

Invariants:
    - SideloadError -> structured JSON with error code, message, severity, http_status
    - Exception (catch-all) -> never leaks internal details

Design Decisions:
    - Two-layer handler: domain (SideloadError), catch-all (Exception)
    - Opt-in via register_error_handlers(app): the host app owns routes and validation handling
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sideload.core.errors import SideloadError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_sideload_error_handler(app)
    _register_generic_error_handler(app)


def _register_sideload_error_handler(app: FastAPI) -> None:
    """Register sideload domain/configuration error handler."""

    @app.exception_handler(SideloadError)
    async def sideload_error_handler(request: Request, exc: SideloadError):
        """Handle all sideload errors."""
        logger.error(
            f"SideloadError: {exc.message}",
            extra={"error_code": exc.code, "type_handle": exc.context.type_handle},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
