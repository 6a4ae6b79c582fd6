"""Provider registry — the ordered set of currently usable egress providers.

Provider specs are registered once; whether each one is enabled is derived
from the configuration source on every call, so a reloaded configuration is
picked up by the next orchestrated call without restarting the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Sequence

import structlog

from mediagate.shared.egress.errors import ConfigurationIncomplete
from mediagate.shared.egress.types import ProviderDefinition, RouteEndpoint, RouteKind

logger = structlog.get_logger(__name__)

ProviderParams = Mapping[str, Any]


class ProviderConfigSource(Protocol):
    """Current credential parameters, loaded once per registry snapshot.

    ``load`` returns params keyed by provider name; a provider absent from
    the result has no configuration.
    """

    def load(self, providers: Sequence[str]) -> Mapping[str, ProviderParams]: ...


@dataclass(frozen=True)
class ProviderSpec:
    """Static registration entry.

    Attributes:
        name:      Unique provider name; also the configuration key prefix.
        priority:  Lower = tried first. Ties keep registration order.
        route_kind: Network class of the produced routes.
        required:  Parameters that must be present for the provider to be enabled.
        factory:   Builds the endpoint variant from a complete parameter set.
    """

    name: str
    priority: int
    route_kind: RouteKind
    required: tuple[str, ...]
    factory: Callable[[ProviderParams], RouteEndpoint]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class ProviderRegistry:
    """Read-only view over the registered providers."""

    def __init__(self, specs: Sequence[ProviderSpec], config: ProviderConfigSource) -> None:
        names = [s.name for s in specs]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate provider names in {names}")
        self._specs = tuple(specs)
        self._config = config

    def list_all(self) -> list[ProviderDefinition]:
        """Every registered provider in registration order, enabled or not."""
        # One load per snapshot so a reload never mixes old and new values
        loaded = self._config.load([spec.name for spec in self._specs])
        return [self._snapshot(spec, loaded.get(spec.name) or {}) for spec in self._specs]

    def list_enabled(self) -> list[ProviderDefinition]:
        """Enabled providers sorted by priority (stable for equal priority)."""
        enabled = [d for d in self.list_all() if d.enabled]
        return sorted(enabled, key=lambda d: d.priority)

    # ── Internals ────────────────────────────────────────────
    def _snapshot(self, spec: ProviderSpec, params: ProviderParams) -> ProviderDefinition:
        missing = tuple(p for p in spec.required if _is_missing(params.get(p)))
        if missing:
            incomplete = ConfigurationIncomplete(spec.name, missing)
            logger.debug("provider_disabled", provider=spec.name, reason=str(incomplete))
            return ProviderDefinition(
                name=spec.name,
                enabled=False,
                priority=spec.priority,
                route_kind=spec.route_kind,
            )
        return ProviderDefinition(
            name=spec.name,
            enabled=True,
            priority=spec.priority,
            route_kind=spec.route_kind,
            endpoint=spec.factory(params),
        )
