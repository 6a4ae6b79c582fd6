"""Query handlers — read-side use cases.

Query handlers fetch through the egress orchestrator and return domain
objects. Nothing is written to disk here.
"""

from __future__ import annotations

import structlog
from dataclasses import dataclass

from mediagate.domain.entities import MediaInfo, validate_media_url
from mediagate.domain.services.format_catalog import summarize
from mediagate.ports.outbound import MediaFetcherPort
from mediagate.shared.egress.orchestrator import RetryOrchestrator
from mediagate.shared.egress.registry import ProviderRegistry
from mediagate.shared.egress.types import ProviderDefinition, RetryPolicy

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════
#  Get Media Info
# ═══════════════════════════════════════════════════════════════
@dataclass
class GetMediaInfoQuery:
    url: str


class GetMediaInfoHandler:
    def __init__(
        self,
        fetcher: MediaFetcherPort,
        orchestrator: RetryOrchestrator,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._policy = policy

    async def handle(self, query: GetMediaInfoQuery) -> MediaInfo:
        url = validate_media_url(query.url)
        logger.debug("get_media_info", url=url)
        raw = await self._orchestrator.run_with_fallback(
            lambda route: self._fetcher.fetch_info(url, route=route),
            self._policy,
        )
        return summarize(raw)


# ═══════════════════════════════════════════════════════════════
#  List Routes
# ═══════════════════════════════════════════════════════════════
class ListRoutesHandler:
    """Registry snapshot for operators; never exposes credentials."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry

    async def handle(self) -> list[ProviderDefinition]:
        return self._registry.list_all()
