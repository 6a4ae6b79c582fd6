"""Dependency injection container — wires adapters to ports.

FastAPI's ``Depends()`` system uses these factories to inject the
correct adapter implementations into route handlers.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from mediagate.adapters.outbound.media import YtDlpMediaFetcher
from mediagate.adapters.outbound.proxy_list import HttpProxyListSource
from mediagate.adapters.outbound.storage import DownloadJanitor
from mediagate.application.commands import DownloadMediaHandler
from mediagate.application.queries import GetMediaInfoHandler, ListRoutesHandler
from mediagate.config import Settings, get_settings
from mediagate.ports.outbound import MediaFetcherPort
from mediagate.shared.egress.orchestrator import RetryOrchestrator
from mediagate.shared.egress.probe import RouteProber
from mediagate.shared.egress.providers import SettingsConfigSource, default_provider_specs
from mediagate.shared.egress.registry import ProviderRegistry


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


# ── Singletons ───────────────────────────────────────────────
_registry: ProviderRegistry | None = None
_orchestrator: RetryOrchestrator | None = None
_fetcher: YtDlpMediaFetcher | None = None
_janitor: DownloadJanitor | None = None
_proxy_sources: dict[str, HttpProxyListSource] = {}


def _proxy_list_source(list_url: str) -> HttpProxyListSource:
    # One client per list URL; the URL itself may change on reload.
    if list_url not in _proxy_sources:
        _proxy_sources[list_url] = HttpProxyListSource(
            list_url,
            timeout=get_cached_settings().free_proxy_list_timeout_seconds,
        )
    return _proxy_sources[list_url]


def get_registry() -> ProviderRegistry:
    """Registry re-reads the environment on every lookup (hot reload)."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry(
            default_provider_specs(_proxy_list_source),
            SettingsConfigSource(get_settings),
        )
    return _registry


def get_orchestrator(registry: ProviderRegistry = Depends(get_registry)) -> RetryOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = RetryOrchestrator(
            registry,
            default_policy=get_cached_settings().retry_policy(),
        )
    return _orchestrator


def get_media_fetcher() -> MediaFetcherPort:
    global _fetcher
    if _fetcher is None:
        _fetcher = YtDlpMediaFetcher(
            socket_timeout=get_cached_settings().media_socket_timeout_seconds,
        )
    return _fetcher


def get_janitor() -> DownloadJanitor:
    global _janitor
    if _janitor is None:
        _janitor = DownloadJanitor(
            delay_seconds=get_cached_settings().download_cleanup_delay_seconds,
        )
    return _janitor


def get_prober(registry: ProviderRegistry = Depends(get_registry)) -> RouteProber:
    s = get_cached_settings()
    return RouteProber(registry, probe_url=s.probe_url, timeout=s.probe_timeout_seconds)


# ── Handlers ─────────────────────────────────────────────────
def get_media_info_handler(
    fetcher: MediaFetcherPort = Depends(get_media_fetcher),
    orchestrator: RetryOrchestrator = Depends(get_orchestrator),
) -> GetMediaInfoHandler:
    return GetMediaInfoHandler(fetcher, orchestrator)


def get_download_handler(
    fetcher: MediaFetcherPort = Depends(get_media_fetcher),
    orchestrator: RetryOrchestrator = Depends(get_orchestrator),
    janitor: DownloadJanitor = Depends(get_janitor),
) -> DownloadMediaHandler:
    return DownloadMediaHandler(
        fetcher,
        orchestrator,
        janitor,
        downloads_dir=Path(get_cached_settings().downloads_dir),
    )


def get_list_routes_handler(
    registry: ProviderRegistry = Depends(get_registry),
) -> ListRoutesHandler:
    return ListRoutesHandler(registry)


# ── Shutdown ─────────────────────────────────────────────────
async def close_resources() -> None:
    if _janitor is not None:
        await _janitor.shutdown()
    for source in list(_proxy_sources.values()):
        await source.close()
    _proxy_sources.clear()
