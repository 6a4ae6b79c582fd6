"""Core types for the multi-provider egress layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union
from urllib.parse import quote

from mediagate.shared.observability.redaction import redact_url

if TYPE_CHECKING:
    from mediagate.ports.outbound import ProxyListSource


class RouteKind(str, enum.Enum):
    """Network class of an egress route."""

    RESIDENTIAL = "residential"
    DATACENTER = "datacenter"
    NONE = "none"


class OrchestratorState(str, enum.Enum):
    """States of a single orchestrated call."""

    SELECTING = "selecting"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    BACKING_OFF = "backing_off"
    EXHAUSTED = "exhausted"
    FALLBACK_DIRECT = "fallback_direct"
    FAILED = "failed"


def _authority(username: str, password: str, host: str, port: int) -> str:
    return f"{quote(username, safe='')}:{quote(password, safe='')}@{host}:{port}"


# ── Endpoint variants (closed set) ───────────────────────────
@dataclass(frozen=True)
class StickySessionEndpoint:
    """Gateway that pins an exit IP to ``<username>-session-<token>``."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    scheme: str = "http"

    async def build(self, session_token: str) -> str | None:
        username = f"{self.username}-session-{session_token}" if session_token else self.username
        return f"{self.scheme}://{_authority(username, self.password, self.host, self.port)}"


@dataclass(frozen=True)
class StaticEndpoint:
    """Fixed gateway; identity is scoped by the account, the token is ignored."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    scheme: str = "http"

    async def build(self, session_token: str) -> str | None:
        return f"{self.scheme}://{_authority(self.username, self.password, self.host, self.port)}"


@dataclass(frozen=True)
class ProxyListEndpoint:
    """Public proxy list; each build looks up one ``host:port`` entry."""

    source: ProxyListSource
    scheme: str = "http"

    async def build(self, session_token: str) -> str | None:
        entry = await self.source.pick()
        if not entry:
            return None
        return f"{self.scheme}://{entry}"


RouteEndpoint = Union[StickySessionEndpoint, StaticEndpoint, ProxyListEndpoint]


@dataclass(frozen=True)
class ProviderDefinition:
    """Immutable snapshot of one egress provider.

    Attributes:
        name:        Unique identifier (e.g. "brightdata").
        enabled:     True iff every parameter the endpoint needs is configured.
        priority:    Lower = tried first.
        route_kind:  Network class of the routes it produces.
        endpoint:    Variant that turns a session token into a route URL.
                     ``None`` when the provider is disabled.
    """

    name: str
    enabled: bool
    priority: int
    route_kind: RouteKind
    endpoint: RouteEndpoint | None = None

    async def build_route(self, session_token: str) -> str | None:
        if self.endpoint is None:
            return None
        return await self.endpoint.build(session_token)


@dataclass(frozen=True)
class RouteDescriptor:
    """Route handed to a single fetch attempt.

    ``route_url`` carries credentials and is kept out of ``repr``; log
    ``redacted_url`` instead.
    """

    route_url: str = field(repr=False)
    provider_name: str
    session_token: str
    attempt_index: int

    @property
    def redacted_url(self) -> str:
        return redact_url(self.route_url)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and exponential backoff bounds for one orchestrated call."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10_000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("backoff delays must be non-negative")

    def backoff_ms(self, attempt: int) -> int:
        """Delay to wait after a failure at ``attempt`` (0-based)."""
        return min(self.base_delay_ms * (2 ** attempt), self.max_delay_ms)


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one attempt.

    ``route`` is None for direct attempts and for attempts whose route could
    not be built; ``provider_name`` tells the two apart.
    """

    attempt_index: int
    route: RouteDescriptor | None
    succeeded: bool
    error: str | None = None
    provider_name: str = "direct"
    latency_ms: float = 0.0
