"""Media adapter backed by yt-dlp.

Each call is one network round against the media site, made through the
given route (or directly). yt-dlp's own retry loops are switched off so the
egress orchestrator stays in charge of retries. yt-dlp is synchronous, so
calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Any

import structlog
import yt_dlp

from mediagate.domain.entities import DownloadRequest, safe_filename
from mediagate.domain.exceptions import MediaError
from mediagate.ports.outbound import MediaFetcherPort
from mediagate.shared.egress.types import RouteDescriptor
from mediagate.shared.observability.redaction import redact_text

logger = structlog.get_logger(__name__)


class _QuietLogger:
    """Routes yt-dlp's own chatter to structlog at debug level."""

    def debug(self, msg: str) -> None:
        logger.debug("ytdlp", message=redact_text(msg))

    def info(self, msg: str) -> None:
        logger.debug("ytdlp", message=redact_text(msg))

    def warning(self, msg: str) -> None:
        logger.debug("ytdlp_warning", message=redact_text(msg))

    def error(self, msg: str) -> None:
        logger.debug("ytdlp_error", message=redact_text(msg))


class YtDlpMediaFetcher(MediaFetcherPort):
    """Fetches metadata and media bytes with yt-dlp."""

    def __init__(self, *, socket_timeout: float = 30.0) -> None:
        self._socket_timeout = socket_timeout

    def base_options(self, route: RouteDescriptor | None) -> dict[str, Any]:
        return {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "socket_timeout": self._socket_timeout,
            "retries": 0,
            "fragment_retries": 0,
            "extractor_retries": 0,
            # Empty string forces a direct connection even if HTTP(S)_PROXY is set
            "proxy": route.route_url if route else "",
            "logger": _QuietLogger(),
        }

    # ── Port implementation ──────────────────────────────────
    async def fetch_info(self, url: str, *, route: RouteDescriptor | None) -> dict[str, Any]:
        opts = self.base_options(route)
        opts["skip_download"] = True
        return await asyncio.to_thread(self._extract, url, opts)

    async def download(
        self,
        request: DownloadRequest,
        *,
        dest_dir: Path,
        route: RouteDescriptor | None,
    ) -> Path:
        """Download into a private work directory under ``dest_dir``.

        The returned file lives in that directory. The directory is removed
        again if the download fails, so partial files never stay behind.
        """
        dest_dir.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix="dl-", dir=dest_dir))
        opts = self.base_options(route)
        opts["format"] = request.format_selector()
        opts["paths"] = {"home": str(work_dir)}
        opts["outtmpl"] = {"default": "%(id)s.%(ext)s"}
        try:
            return await asyncio.to_thread(self._download, request.url, opts, work_dir)
        except BaseException:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise

    # ── Blocking helpers (worker thread) ─────────────────────
    def _extract(self, url: str, opts: dict[str, Any]) -> dict[str, Any]:
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
                return ydl.sanitize_info(info)
        except yt_dlp.utils.YoutubeDLError as exc:
            raise MediaError(redact_text(str(exc))) from exc

    def _download(self, url: str, opts: dict[str, Any], work_dir: Path) -> Path:
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=True)
                downloads = info.get("requested_downloads") or []
                filepath = downloads[0].get("filepath") if downloads else None
                path = Path(filepath or ydl.prepare_filename(info))
        except yt_dlp.utils.YoutubeDLError as exc:
            raise MediaError(redact_text(str(exc))) from exc

        if not path.is_absolute():
            path = work_dir / path.name
        if not path.exists():
            raise MediaError(f"Download finished but {path.name} is missing")

        target = work_dir / f"{safe_filename(str(info.get('title') or ''))}{path.suffix}"
        path = path.replace(target)
        logger.info("media_downloaded", file=target.name, size_bytes=target.stat().st_size)
        return path
