"""Public proxy-list adapter.

Downloads a plain-text list (one ``host:port`` per line, as served by the
usual free proxy-list APIs) and hands out one entry per lookup.
"""

from __future__ import annotations

import random
import re

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mediagate.ports.outbound import ProxyListSource
from mediagate.shared.egress.errors import RouteConstructionFailed

logger = structlog.get_logger(__name__)

_ENTRY = re.compile(r"^[A-Za-z0-9.\-]+:\d{1,5}$")

# One quick retry on transport errors only; HTTP status errors are final.
_list_retry = retry(
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=0.2, max=1),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)


def parse_proxy_list(body: str) -> list[str]:
    """Keep well-formed ``host:port`` lines; skip blanks, comments and junk."""
    entries: list[str] = []
    for line in body.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and _ENTRY.match(line):
            entries.append(line)
    return entries


class HttpProxyListSource(ProxyListSource):
    """Fetches the list on every lookup so stale entries do not pile up."""

    def __init__(
        self,
        list_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        rng: random.Random | None = None,
    ) -> None:
        self._list_url = list_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._rng = rng or random.Random()

    async def pick(self) -> str | None:
        try:
            body = await self._fetch_list()
        except httpx.HTTPError as exc:
            raise RouteConstructionFailed("free_proxy", f"proxy list unavailable: {exc}") from exc

        entries = parse_proxy_list(body)
        logger.debug("proxy_list_fetched", entries=len(entries))
        if not entries:
            return None
        return self._rng.choice(entries)

    async def close(self) -> None:
        await self._client.aclose()

    @_list_retry
    async def _fetch_list(self) -> str:
        response = await self._client.get(self._list_url)
        response.raise_for_status()
        return response.text
