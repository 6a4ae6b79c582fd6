"""Route builder — provider + session token → route descriptor."""

from __future__ import annotations

import structlog

from mediagate.shared.egress.errors import RouteConstructionFailed
from mediagate.shared.egress.types import ProviderDefinition, RouteDescriptor

logger = structlog.get_logger(__name__)


class RouteBuilder:
    """Builds the descriptor for one attempt, or ``None`` if the provider has no route now."""

    async def build(
        self,
        provider: ProviderDefinition,
        session_token: str,
        *,
        attempt_index: int,
    ) -> RouteDescriptor | None:
        try:
            route_url = await provider.build_route(session_token)
        except RouteConstructionFailed as exc:
            logger.warning(
                "route_construction_failed",
                provider=provider.name,
                attempt=attempt_index + 1,
                reason=exc.reason,
            )
            return None

        if not route_url:
            logger.warning(
                "route_construction_failed",
                provider=provider.name,
                attempt=attempt_index + 1,
                reason="no route available",
            )
            return None

        return RouteDescriptor(
            route_url=route_url,
            provider_name=provider.name,
            session_token=session_token,
            attempt_index=attempt_index,
        )
