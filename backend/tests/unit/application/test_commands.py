"""Unit tests for command handlers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from mediagate.application.commands import DownloadMediaCommand, DownloadMediaHandler
from mediagate.domain.enums import MediaKind
from mediagate.domain.exceptions import ValidationError
from mediagate.shared.egress.errors import AllAttemptsExhausted
from mediagate.shared.egress.orchestrator import RetryOrchestrator


@pytest.fixture
def janitor() -> MagicMock:
    return MagicMock()


@pytest.fixture
def downloads_dir(tmp_path: Path) -> Path:
    return tmp_path / "downloads"


class TestDownloadMediaHandler:
    @pytest.mark.asyncio
    async def test_download_schedules_cleanup(
        self, make_registry, clock, janitor, downloads_dir
    ) -> None:
        registry, _ = make_registry(("p1", 1))
        saved = downloads_dir / "clip.mp4"
        fetcher = AsyncMock()
        fetcher.download.return_value = saved
        handler = DownloadMediaHandler(
            fetcher,
            RetryOrchestrator(registry, sleep=clock.sleep),
            janitor,
            downloads_dir=downloads_dir,
        )

        path = await handler.handle(
            DownloadMediaCommand(url="https://media.test/v/1", quality="720p")
        )

        assert path == saved
        janitor.schedule_removal.assert_called_once_with(saved)
        (request,), kwargs = fetcher.download.call_args
        assert request.kind is MediaKind.VIDEO
        assert request.max_height == 720
        assert kwargs["dest_dir"] == downloads_dir
        assert kwargs["route"].provider_name == "p1"

    @pytest.mark.asyncio
    async def test_cleanup_covers_whole_work_directory(
        self, make_registry, janitor, downloads_dir
    ) -> None:
        registry, _ = make_registry(("p1", 1))
        work_dir = downloads_dir / "dl-a1b2"
        fetcher = AsyncMock()
        fetcher.download.return_value = work_dir / "clip.mp4"
        handler = DownloadMediaHandler(
            fetcher, RetryOrchestrator(registry), janitor, downloads_dir=downloads_dir
        )

        await handler.handle(DownloadMediaCommand(url="https://media.test/v/1"))

        janitor.schedule_removal.assert_called_once_with(work_dir)

    @pytest.mark.asyncio
    async def test_audio_download(self, make_registry, janitor, downloads_dir) -> None:
        registry, _ = make_registry()
        fetcher = AsyncMock()
        fetcher.download.return_value = downloads_dir / "clip.m4a"
        handler = DownloadMediaHandler(
            fetcher, RetryOrchestrator(registry), janitor, downloads_dir=downloads_dir
        )

        await handler.handle(DownloadMediaCommand(url="https://media.test/v/1", kind="audio"))

        (request,), kwargs = fetcher.download.call_args
        assert request.format_selector() == "bestaudio/best"
        assert kwargs["route"] is None

    @pytest.mark.asyncio
    async def test_unknown_kind_rejected(self, make_registry, janitor, downloads_dir) -> None:
        registry, _ = make_registry()
        fetcher = AsyncMock()
        handler = DownloadMediaHandler(
            fetcher, RetryOrchestrator(registry), janitor, downloads_dir=downloads_dir
        )

        with pytest.raises(ValidationError, match="Unknown media kind"):
            await handler.handle(DownloadMediaCommand(url="https://media.test/v/1", kind="gif"))
        fetcher.download.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhaustion_schedules_nothing(
        self, make_registry, clock, janitor, downloads_dir
    ) -> None:
        registry, _ = make_registry(("p1", 1), ("p2", 2))
        fetcher = AsyncMock()
        fetcher.download.side_effect = OSError("blocked")
        handler = DownloadMediaHandler(
            fetcher,
            RetryOrchestrator(registry, sleep=clock.sleep),
            janitor,
            downloads_dir=downloads_dir,
        )

        with pytest.raises(AllAttemptsExhausted):
            await handler.handle(DownloadMediaCommand(url="https://media.test/v/1"))

        routes = [c.kwargs["route"] for c in fetcher.download.call_args_list]
        assert [r.provider_name if r else None for r in routes] == ["p1", "p2", "p1", None]
        janitor.schedule_removal.assert_not_called()
