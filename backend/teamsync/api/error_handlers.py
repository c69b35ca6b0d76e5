"""
Global exception handlers.

Domain errors become ``{"error": {"kind", "code", "message"}}`` with the
status code of their kind; request validation errors use the same envelope
with kind ValidationError; anything else is a 500 that never leaks internals.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from teamsync.core.errors import KIND_VALIDATION, TeamSyncError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    @app.exception_handler(TeamSyncError)
    async def domain_error_handler(request: Request, exc: TeamSyncError):
        logger.info(f"{exc.kind}/{exc.code} on {request.method} {request.url.path}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all, never leaks internal details."""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "kind": "Internal",
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )


def _field_name(loc) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def build_validation_error_response(exc: RequestValidationError) -> dict:
    errors = exc.errors()
    first = errors[0] if errors else {"loc": (), "msg": "Invalid request data"}
    return {
        "error": {
            "kind": KIND_VALIDATION,
            "code": "VALIDATION_ERROR",
            "message": first["msg"],
            "field": _field_name(first["loc"]),
            "details": [
                {"field": _field_name(e["loc"]), "message": e["msg"], "type": e["type"]}
                for e in errors
            ],
        }
    }
