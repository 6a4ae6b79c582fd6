"""Command handlers — write-side use cases.

Each handler encapsulates a single operation that produces side effects
(files on disk). Handlers depend only on port interfaces and the egress
orchestrator, never on concrete adapters.
"""

from __future__ import annotations

import structlog
from dataclasses import dataclass
from pathlib import Path

from mediagate.adapters.outbound.storage import DownloadJanitor
from mediagate.domain.entities import DownloadRequest
from mediagate.domain.enums import MediaKind
from mediagate.domain.exceptions import ValidationError
from mediagate.ports.outbound import MediaFetcherPort
from mediagate.shared.egress.orchestrator import RetryOrchestrator
from mediagate.shared.egress.types import RetryPolicy
from mediagate.shared.observability.metrics import MEDIA_DOWNLOADS_TOTAL

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════
#  Download Media
# ═══════════════════════════════════════════════════════════════
@dataclass
class DownloadMediaCommand:
    """Input for downloading a media resource."""

    url: str
    kind: str = MediaKind.VIDEO.value
    quality: str | None = None
    video_only: bool = False


class DownloadMediaHandler:
    """Downloads through the egress orchestrator and schedules cleanup of the file."""

    def __init__(
        self,
        fetcher: MediaFetcherPort,
        orchestrator: RetryOrchestrator,
        janitor: DownloadJanitor,
        *,
        downloads_dir: Path,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._janitor = janitor
        self._downloads_dir = downloads_dir
        self._policy = policy

    async def handle(self, cmd: DownloadMediaCommand) -> Path:
        try:
            kind = MediaKind(cmd.kind)
        except ValueError:
            raise ValidationError(f"Unknown media kind: {cmd.kind!r}") from None

        request = DownloadRequest(
            url=cmd.url,
            kind=kind,
            quality=cmd.quality,
            video_only=cmd.video_only,
        )
        logger.info(
            "download_requested",
            url=request.url,
            kind=kind.value,
            format=request.format_selector(),
        )

        path = await self._orchestrator.run_with_fallback(
            lambda route: self._fetcher.download(
                request, dest_dir=self._downloads_dir, route=route
            ),
            self._policy,
        )

        MEDIA_DOWNLOADS_TOTAL.labels(kind=kind.value).inc()
        # Downloads land in a per-request work directory; remove it whole
        work_dir = path.parent
        self._janitor.schedule_removal(work_dir if work_dir != self._downloads_dir else path)
        return path
