"""Shared test fixtures."""

from __future__ import annotations

import os
import sys
from typing import Any, Callable, Sequence

import pytest

# Add src to path so imports work
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from mediagate.shared.egress.registry import ProviderParams, ProviderRegistry, ProviderSpec
from mediagate.shared.egress.types import RouteDescriptor, RouteKind, StickySessionEndpoint

CREDENTIALS = ("username", "password", "host", "port")


class VirtualClock:
    """Records requested sleeps instead of waiting."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


class DictConfigSource:
    """Mutable in-memory configuration, one params dict per provider."""

    def __init__(self, params: dict[str, dict[str, Any]] | None = None) -> None:
        self.params = params or {}
        self.lookups = 0

    def load(self, providers: Sequence[str]) -> dict[str, ProviderParams]:
        self.lookups += 1
        return {name: self.params[name] for name in providers if name in self.params}


def sticky(params: ProviderParams) -> StickySessionEndpoint:
    return StickySessionEndpoint(
        host=params["host"],
        port=int(params["port"]),
        username=params["username"],
        password=params["password"],
    )


def creds(user: str) -> dict[str, Any]:
    return {"username": user, "password": "s3cret", "host": f"{user}.proxy.test", "port": 8000}


class ScriptedFetch:
    """Fetch operation that records every route and fails where told to."""

    def __init__(
        self,
        fail_for: Callable[[RouteDescriptor | None], bool] = lambda route: True,
        result: Any = "ok",
    ) -> None:
        self.fail_for = fail_for
        self.result = result
        self.calls: list[RouteDescriptor | None] = []

    @property
    def providers(self) -> list[str | None]:
        return [r.provider_name if r else None for r in self.calls]

    async def __call__(self, route: RouteDescriptor | None) -> Any:
        self.calls.append(route)
        if self.fail_for(route):
            via = route.provider_name if route else "direct"
            raise ConnectionError(f"blocked via {via}")
        return self.result


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def make_fetch() -> type[ScriptedFetch]:
    return ScriptedFetch


@pytest.fixture
def make_registry() -> Callable[..., tuple[ProviderRegistry, DictConfigSource]]:
    """Build a registry of sticky-session providers from ``(name, priority)`` pairs.

    Every provider gets credentials unless listed in ``disabled``.
    """

    def _make(
        *providers: tuple[str, int],
        disabled: tuple[str, ...] = (),
    ) -> tuple[ProviderRegistry, DictConfigSource]:
        specs = [
            ProviderSpec(name, priority, RouteKind.RESIDENTIAL, CREDENTIALS, sticky)
            for name, priority in providers
        ]
        config = DictConfigSource(
            {name: creds(name) for name, _ in providers if name not in disabled}
        )
        return ProviderRegistry(specs, config), config

    return _make
