"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from mediagate.adapters.inbound.rest.routers import health_router, media_router, routes_router
from mediagate.config import Settings, get_settings
from mediagate.dependencies import close_resources, get_registry
from mediagate.shared.errors import register_exception_handlers
from mediagate.shared.middleware import AccessLogMiddleware, RequestContextMiddleware
from mediagate.shared.observability import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — startup & shutdown hooks."""
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    enabled = [p.name for p in get_registry().list_enabled()]
    logger.info(
        "application_starting",
        env=settings.app_env.value,
        enabled_routes=enabled or ["direct"],
    )

    yield

    await close_resources()
    logger.info("application_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory — creates a fully configured FastAPI instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Media Gateway",
        description=(
            "Fetches media metadata and media files through rotating proxy "
            "routes, falling back to a direct connection when every route fails."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Store settings in app state for lifecycle access
    app.state.settings = settings

    # ── Middleware (order matters: last added = outermost) ───
    cors_origins = settings.cors_origins
    allow_all_origins = "*" in cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all_origins else cors_origins,
        allow_origin_regex=".*" if allow_all_origins else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── Routers ──────────────────────────────────────────────
    api_prefix = "/api/v1"
    app.include_router(health_router, prefix=api_prefix)
    app.include_router(media_router, prefix=api_prefix)
    app.include_router(routes_router, prefix=api_prefix)

    return app


# Uvicorn entry-point
app = create_app()
