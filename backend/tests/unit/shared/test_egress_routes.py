"""Tests for session tokens, endpoint variants, and route building."""

from __future__ import annotations

import pytest

from mediagate.shared.egress.builder import RouteBuilder
from mediagate.shared.egress.errors import RouteConstructionFailed
from mediagate.shared.egress.session import RandomSessionGenerator
from mediagate.shared.egress.types import (
    ProviderDefinition,
    ProxyListEndpoint,
    RouteKind,
    StaticEndpoint,
    StickySessionEndpoint,
)


class FixedListSource:
    def __init__(self, entry: str | None) -> None:
        self.entry = entry

    async def pick(self) -> str | None:
        return self.entry


class FailingListSource:
    async def pick(self) -> str | None:
        raise RouteConstructionFailed("free_proxy", "proxy list unavailable")


def _provider(endpoint, name: str = "prov") -> ProviderDefinition:
    return ProviderDefinition(
        name=name,
        enabled=True,
        priority=1,
        route_kind=RouteKind.RESIDENTIAL,
        endpoint=endpoint,
    )


# ═══════════════════════════════════════════════════════════════
#  Session tokens
# ═══════════════════════════════════════════════════════════════
class TestRandomSessionGenerator:
    def test_tokens_are_unique(self) -> None:
        sessions = RandomSessionGenerator()
        tokens = {sessions.new_session_token() for _ in range(1000)}
        assert len(tokens) == 1000

    def test_tokens_are_fixed_width_alphanumeric(self) -> None:
        sessions = RandomSessionGenerator()
        for _ in range(50):
            token = sessions.new_session_token()
            assert len(token) == 10
            assert token.isalnum()
            assert token == token.lower()

    def test_injected_entropy_is_deterministic(self) -> None:
        assert RandomSessionGenerator(entropy=lambda bits: 0).new_session_token() == "0000000000"
        assert RandomSessionGenerator(entropy=lambda bits: 35).new_session_token() == "000000000z"
        assert RandomSessionGenerator(entropy=lambda bits: 36).new_session_token() == "0000000010"

    def test_requested_bit_count_is_passed_through(self) -> None:
        requested: list[int] = []

        def entropy(bits: int) -> int:
            requested.append(bits)
            return 0

        sessions = RandomSessionGenerator(entropy=entropy, bits=32)
        assert len(sessions.new_session_token()) == 7
        assert requested == [32]

    def test_too_little_entropy_rejected(self) -> None:
        with pytest.raises(ValueError):
            RandomSessionGenerator(bits=16)


# ═══════════════════════════════════════════════════════════════
#  Endpoint variants
# ═══════════════════════════════════════════════════════════════
class TestEndpoints:
    @pytest.mark.asyncio
    async def test_sticky_session_embeds_token_in_username(self) -> None:
        endpoint = StickySessionEndpoint(
            host="brd.superproxy.io", port=22225, username="customer", password="pw"
        )
        url = await endpoint.build("abc123")
        assert url == "http://customer-session-abc123:pw@brd.superproxy.io:22225"

    @pytest.mark.asyncio
    async def test_credentials_are_percent_encoded(self) -> None:
        endpoint = StickySessionEndpoint(host="gw", port=1, username="a@b", password="p:w/d")
        url = await endpoint.build("t")
        assert url == "http://a%40b-session-t:p%3Aw%2Fd@gw:1"

    @pytest.mark.asyncio
    async def test_static_endpoint_ignores_token(self) -> None:
        endpoint = StaticEndpoint(host="pr.oxylabs.io", port=7777, username="u", password="p")
        assert await endpoint.build("one") == await endpoint.build("two")
        assert await endpoint.build("one") == "http://u:p@pr.oxylabs.io:7777"

    @pytest.mark.asyncio
    async def test_scheme_is_respected(self) -> None:
        endpoint = StaticEndpoint(host="h", port=1080, username="u", password="p", scheme="socks5")
        assert (await endpoint.build("t")).startswith("socks5://")

    @pytest.mark.asyncio
    async def test_proxy_list_endpoint(self) -> None:
        assert await ProxyListEndpoint(FixedListSource("1.2.3.4:8080")).build("t") == "http://1.2.3.4:8080"
        assert await ProxyListEndpoint(FixedListSource(None)).build("t") is None

    def test_password_hidden_from_repr(self) -> None:
        endpoint = StickySessionEndpoint(host="h", port=1, username="u", password="s3cret")
        assert "s3cret" not in repr(endpoint)

    @pytest.mark.asyncio
    async def test_disabled_definition_builds_nothing(self) -> None:
        provider = ProviderDefinition(
            name="off", enabled=False, priority=1, route_kind=RouteKind.RESIDENTIAL
        )
        assert await provider.build_route("t") is None


# ═══════════════════════════════════════════════════════════════
#  RouteBuilder
# ═══════════════════════════════════════════════════════════════
class TestRouteBuilder:
    @pytest.mark.asyncio
    async def test_builds_descriptor(self) -> None:
        endpoint = StickySessionEndpoint(host="h", port=1, username="u", password="s3cret")
        route = await RouteBuilder().build(_provider(endpoint), "tok", attempt_index=2)

        assert route is not None
        assert route.provider_name == "prov"
        assert route.session_token == "tok"
        assert route.attempt_index == 2
        assert route.route_url == "http://u-session-tok:s3cret@h:1"
        assert route.redacted_url == "http://***@h:1"
        assert "s3cret" not in repr(route)

    @pytest.mark.asyncio
    async def test_empty_list_yields_no_route(self) -> None:
        route = await RouteBuilder().build(
            _provider(ProxyListEndpoint(FixedListSource(None))), "tok", attempt_index=0
        )
        assert route is None

    @pytest.mark.asyncio
    async def test_construction_failure_yields_no_route(self) -> None:
        route = await RouteBuilder().build(
            _provider(ProxyListEndpoint(FailingListSource())), "tok", attempt_index=0
        )
        assert route is None

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self) -> None:
        class Exploding:
            async def pick(self) -> str | None:
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await RouteBuilder().build(
                _provider(ProxyListEndpoint(Exploding())), "tok", attempt_index=0
            )
