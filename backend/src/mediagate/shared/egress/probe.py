"""Route probe — checks which egress routes currently reach the internet.

Sends one GET to an IP-echo endpoint through each enabled provider (with a
fresh session) and through the direct path, and reports what came back.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

import httpx
import structlog

from mediagate.shared.egress.builder import RouteBuilder
from mediagate.shared.egress.registry import ProviderRegistry
from mediagate.shared.egress.session import RandomSessionGenerator, SessionGenerator
from mediagate.shared.egress.types import ProviderDefinition, RouteDescriptor
from mediagate.shared.observability.redaction import redact_text

logger = structlog.get_logger(__name__)

# Route URL (None = direct) → client that sends through it.
ClientFactory = Callable[[str | None], httpx.AsyncClient]

_IP_KEYS = ("query", "ip", "origin")


@dataclass(frozen=True)
class ProbeResult:
    provider: str
    ok: bool
    latency_ms: float = 0.0
    exit_ip: str | None = None
    error: str | None = None


class RouteProber:
    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        probe_url: str = "http://ip-api.com/json",
        timeout: float = 10.0,
        sessions: SessionGenerator | None = None,
        builder: RouteBuilder | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._registry = registry
        self._probe_url = probe_url
        self._timeout = timeout
        self._sessions = sessions or RandomSessionGenerator()
        self._builder = builder or RouteBuilder()
        self._client_factory = client_factory or self._default_client

    async def probe_all(self) -> list[ProbeResult]:
        """Direct path first, then each enabled provider in priority order."""
        providers = self._registry.list_enabled()
        results = await asyncio.gather(
            self.probe_route(None),
            *(self._probe_provider(p) for p in providers),
        )
        return list(results)

    async def probe_route(self, route: RouteDescriptor | None) -> ProbeResult:
        name = route.provider_name if route else "direct"
        try:
            # e.g. an unsupported proxy scheme is rejected here, before any I/O
            client = self._client_factory(route.route_url if route else None)
        except Exception as exc:
            return self._failed(name, exc)

        start = time.monotonic()
        try:
            async with client:
                response = await client.get(self._probe_url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            return self._failed(name, exc)

        latency_ms = round((time.monotonic() - start) * 1000, 1)
        exit_ip = _exit_ip(response)
        logger.info("route_probe_ok", provider=name, exit_ip=exit_ip, latency_ms=latency_ms)
        return ProbeResult(provider=name, ok=True, latency_ms=latency_ms, exit_ip=exit_ip)

    async def _probe_provider(self, provider: ProviderDefinition) -> ProbeResult:
        try:
            route = await self._builder.build(
                provider, self._sessions.new_session_token(), attempt_index=0
            )
        except Exception as exc:
            error = redact_text(f"{type(exc).__name__}: {exc}")
            return ProbeResult(provider=provider.name, ok=False, error=error)
        if route is None:
            return ProbeResult(provider=provider.name, ok=False, error="no route available")
        return await self.probe_route(route)

    @staticmethod
    def _failed(name: str, exc: Exception) -> ProbeResult:
        error = redact_text(f"{type(exc).__name__}: {exc}")
        logger.warning("route_probe_failed", provider=name, error=error)
        return ProbeResult(provider=name, ok=False, error=error)

    def _default_client(self, route_url: str | None) -> httpx.AsyncClient:
        # trust_env=False keeps HTTP(S)_PROXY from hijacking the direct probe
        return httpx.AsyncClient(proxy=route_url, timeout=self._timeout, trust_env=False)


def _exit_ip(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in _IP_KEYS:
        if body.get(key):
            return str(body[key])
    return None
