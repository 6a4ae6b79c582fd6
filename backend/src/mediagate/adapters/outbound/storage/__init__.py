"""Download janitor — removes served files after a grace period."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Awaitable, Callable

import structlog

from mediagate.shared.observability.metrics import DOWNLOADS_REMOVED_TOTAL

logger = structlog.get_logger(__name__)


class DownloadJanitor:
    """Schedules deletion of downloaded files.

    One timer task per path; a directory goes with its contents.
    ``shutdown()`` cancels whatever is still pending, and paths whose timers
    were cancelled are left on disk.
    """

    def __init__(
        self,
        *,
        delay_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._delay = delay_seconds
        self._sleep = sleep
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule_removal(self, path: Path) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._remove_later(path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def shutdown(self) -> None:
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("janitor_cancelled_pending", count=len(tasks))

    async def _remove_later(self, path: Path) -> None:
        await self._sleep(self._delay)
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("download_cleanup_failed", file=path.name, error=str(exc))
            return
        DOWNLOADS_REMOVED_TOTAL.inc()
        logger.info("download_removed", file=path.name)
