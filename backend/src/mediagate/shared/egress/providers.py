"""Built-in egress provider table and its settings-backed configuration source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence

import structlog
from pydantic import ValidationError

from mediagate.shared.egress.registry import ProviderParams, ProviderSpec
from mediagate.shared.egress.types import (
    ProxyListEndpoint,
    RouteKind,
    StaticEndpoint,
    StickySessionEndpoint,
)

if TYPE_CHECKING:
    from mediagate.config import Settings
    from mediagate.ports.outbound import ProxyListSource

logger = structlog.get_logger(__name__)

_CREDENTIALS = ("username", "password", "host", "port")
_PARAM_NAMES = (*_CREDENTIALS, "list_url")


def _sticky(params: ProviderParams) -> StickySessionEndpoint:
    return StickySessionEndpoint(
        host=params["host"],
        port=int(params["port"]),
        username=params["username"],
        password=params["password"],
        scheme=params.get("scheme") or "http",
    )


def _static(params: ProviderParams) -> StaticEndpoint:
    return StaticEndpoint(
        host=params["host"],
        port=int(params["port"]),
        username=params["username"],
        password=params["password"],
        scheme=params.get("scheme") or "http",
    )


def default_provider_specs(
    proxy_list_factory: Callable[[str], ProxyListSource],
) -> list[ProviderSpec]:
    """Registration table, in registration order."""

    def _proxy_list(params: ProviderParams) -> ProxyListEndpoint:
        return ProxyListEndpoint(
            source=proxy_list_factory(params["list_url"]),
            scheme=params.get("scheme") or "http",
        )

    return [
        ProviderSpec("brightdata", 1, RouteKind.RESIDENTIAL, _CREDENTIALS, _sticky),
        ProviderSpec("smartproxy", 2, RouteKind.RESIDENTIAL, _CREDENTIALS, _sticky),
        ProviderSpec("oxylabs", 3, RouteKind.RESIDENTIAL, _CREDENTIALS, _static),
        ProviderSpec("free_proxy", 99, RouteKind.DATACENTER, ("list_url",), _proxy_list),
    ]


class SettingsConfigSource:
    """Reads ``<provider>_<param>`` fields from a freshly loaded ``Settings``.

    ``settings_factory`` is called once per registry snapshot so that
    environment or ``.env`` changes are visible to the next ``list_enabled()``.
    An invalid reload disables every provider until it is corrected, which
    leaves only the direct path.
    """

    def __init__(self, settings_factory: Callable[[], Settings]) -> None:
        self._settings_factory = settings_factory

    def load(self, providers: Sequence[str]) -> dict[str, ProviderParams]:
        try:
            settings = self._settings_factory()
        except ValidationError as exc:
            logger.error(
                "provider_config_invalid",
                errors=[".".join(str(p) for p in e["loc"]) for e in exc.errors()],
            )
            return {}
        return {name: self._params(settings, name) for name in providers}

    @staticmethod
    def _params(settings: Settings, provider: str) -> ProviderParams:
        params: dict[str, Any] = {
            name: getattr(settings, f"{provider}_{name}", None) for name in _PARAM_NAMES
        }
        params["scheme"] = settings.proxy_scheme
        return params
