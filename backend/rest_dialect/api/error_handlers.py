"""Error Handlers: global exception handlers that keep stray errors in the dialect's envelope.

Invariants:
    - RestDialectError -> exc.http_status with exc.to_response()
    - RequestValidationError -> 400 {"errors": {field: message}}
    - Exception (catch-all) -> 500 {"error": ...}, never leaks internal details

Design Decisions:
    - The Controller maps backend outcomes itself; these handlers cover errors
      raised outside it (host routes, dependencies, middleware)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rest_dialect.core.errors import RestDialectError
from rest_dialect.infrastructure.observability import request_context

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_dialect_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_dialect_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RestDialectError)
    async def dialect_error_handler(request: Request, exc: RestDialectError):
        logger.warning(
            f"RestDialectError: {exc.message}",
            extra={
                "error_code": exc.code, "status_code": exc.http_status,
                **request_context(request),
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra=request_context(request),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred"},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Flatten pydantic error locations into {"errors": {field: message}}."""
    return {
        "errors": {
            ".".join(str(loc) for loc in e["loc"]): e["msg"]
            for e in exc.errors()
        },
    }
