"""Global exception handlers — map domain and egress errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
import structlog

from mediagate.domain.exceptions import DomainError, MediaError, ValidationError
from mediagate.shared.egress.errors import AllAttemptsExhausted

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all error→HTTP mappings."""

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=422,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(AllAttemptsExhausted)
    async def handle_exhausted(request: Request, exc: AllAttemptsExhausted) -> ORJSONResponse:
        logger.error(
            "all_routes_failed_http",
            path=request.url.path,
            attempts=exc.attempts,
            last_error=str(exc),
        )
        return ORJSONResponse(
            status_code=502,
            content={
                "code": "ALL_ROUTES_FAILED",
                "message": "Operation failed after all routes were tried",
            },
        )

    @app.exception_handler(MediaError)
    async def handle_media(request: Request, exc: MediaError) -> ORJSONResponse:
        logger.error("media_error_http", message=exc.message)
        return ORJSONResponse(
            status_code=502,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(DomainError)
    async def handle_domain(request: Request, exc: DomainError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        return ORJSONResponse(
            status_code=500,
            content={
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            },
        )
