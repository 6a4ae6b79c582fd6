"""Outbound ports — interfaces that infrastructure adapters must implement.

The application layer and the egress core depend only on these
abstractions, never on the concrete media library or HTTP client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from mediagate.domain.entities import DownloadRequest
from mediagate.shared.egress.types import RouteDescriptor


class MediaFetcherPort(ABC):
    """Performs one network call against the media site, through ``route`` or directly.

    Implementations must fail fast: no internal retries, so the egress
    orchestrator's attempt accounting stays accurate.
    """

    @abstractmethod
    async def fetch_info(self, url: str, *, route: RouteDescriptor | None) -> dict[str, Any]: ...

    @abstractmethod
    async def download(
        self,
        request: DownloadRequest,
        *,
        dest_dir: Path,
        route: RouteDescriptor | None,
    ) -> Path: ...


class ProxyListSource(ABC):
    """Dynamic lookup backing the public proxy-list provider."""

    @abstractmethod
    async def pick(self) -> str | None:
        """Return one ``host:port`` entry, or None when the list is empty."""
        ...
