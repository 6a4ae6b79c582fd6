"""REST API routers — thin glue between HTTP and the application handlers."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from fastapi.responses import FileResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from mediagate.application.commands import DownloadMediaCommand, DownloadMediaHandler
from mediagate.application.dtos import (
    DownloadRequestDTO,
    HealthResponse,
    MediaInfoRequest,
    MediaInfoResponse,
    ProbeResultDTO,
    RouteProviderDTO,
)
from mediagate.application.queries import (
    GetMediaInfoHandler,
    GetMediaInfoQuery,
    ListRoutesHandler,
)
from mediagate.dependencies import (
    get_download_handler,
    get_list_routes_handler,
    get_media_info_handler,
    get_prober,
    get_registry,
)
from mediagate.shared.egress.probe import RouteProber
from mediagate.shared.egress.registry import ProviderRegistry


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    registry: ProviderRegistry = Depends(get_registry),
) -> HealthResponse:
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        enabled_routes=len(registry.list_enabled()),
    )


@health_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  Media
# ═══════════════════════════════════════════════════════════════
media_router = APIRouter(tags=["Media"])


@media_router.post("/video-info", response_model=MediaInfoResponse)
async def video_info(
    body: MediaInfoRequest,
    handler: GetMediaInfoHandler = Depends(get_media_info_handler),
) -> MediaInfoResponse:
    """Title, duration, thumbnail and the selectable formats of a media URL."""
    info = await handler.handle(GetMediaInfoQuery(url=body.url))
    return MediaInfoResponse.model_validate(info)


@media_router.post("/download")
async def download(
    body: DownloadRequestDTO,
    handler: DownloadMediaHandler = Depends(get_download_handler),
) -> FileResponse:
    """Download the media and stream the file back; it is deleted shortly after."""
    path = await handler.handle(
        DownloadMediaCommand(
            url=body.url,
            kind=body.kind.value,
            quality=body.quality,
            video_only=body.video_only,
        )
    )
    return FileResponse(path, filename=path.name)


# ═══════════════════════════════════════════════════════════════
#  Egress routes
# ═══════════════════════════════════════════════════════════════
routes_router = APIRouter(prefix="/routes", tags=["Egress Routes"])


@routes_router.get("", response_model=list[RouteProviderDTO])
async def list_routes(
    handler: ListRoutesHandler = Depends(get_list_routes_handler),
) -> list[RouteProviderDTO]:
    """Registered egress providers and whether each is currently configured."""
    providers = await handler.handle()
    return [
        RouteProviderDTO(
            name=p.name,
            priority=p.priority,
            kind=p.route_kind.value,
            enabled=p.enabled,
        )
        for p in providers
    ]


@routes_router.post("/probe", response_model=list[ProbeResultDTO])
async def probe_routes(
    prober: RouteProber = Depends(get_prober),
) -> list[ProbeResultDTO]:
    """Try the direct path and every enabled provider once against the probe URL."""
    results = await prober.probe_all()
    return [ProbeResultDTO.model_validate(r) for r in results]
