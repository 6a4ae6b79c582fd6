"""Retry orchestrator — the main entry-point for routed fetches.

Drives one orchestrated call through its attempt sequence:

    SELECTING → ATTEMPTING → SUCCEEDED
                           → BACKING_OFF → SELECTING (next attempt)
                           → EXHAUSTED → FALLBACK_DIRECT → SUCCEEDED | FAILED

Providers are chosen round-robin by attempt index over the priority-ordered
enabled list, each attempt gets a fresh session token, failed attempts back off
exponentially, and after the last attempt the fetch is tried once more with no
route at all. Attempts are strictly sequential; the orchestrator holds no state
shared between calls.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from mediagate.shared.egress.builder import RouteBuilder
from mediagate.shared.egress.errors import (
    AllAttemptsExhausted,
    FetchFailed,
    RouteConstructionFailed,
)
from mediagate.shared.egress.registry import ProviderRegistry
from mediagate.shared.egress.session import RandomSessionGenerator, SessionGenerator
from mediagate.shared.egress.types import (
    AttemptOutcome,
    OrchestratorState,
    ProviderDefinition,
    RetryPolicy,
    RouteDescriptor,
)
from mediagate.shared.observability.metrics import (
    EGRESS_ATTEMPTS_TOTAL,
    EGRESS_BACKOFF_SECONDS,
    EGRESS_CALLS_TOTAL,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FetchOperation = Callable[[RouteDescriptor | None], Awaitable[T]]
Sleeper = Callable[[float], Awaitable[None]]
AttemptHook = Callable[[AttemptOutcome], None]


class RetryOrchestrator:
    """Runs an injected fetch operation across egress routes until one succeeds.

    Usage::

        orchestrator = RetryOrchestrator(registry)

        info = await orchestrator.run_with_fallback(
            lambda route: fetcher.fetch_info(url, route=route),
        )

    The fetch operation receives a ``RouteDescriptor`` (or ``None`` for a
    direct attempt) and must return the result or raise on failure. It should
    not retry internally.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        sessions: SessionGenerator | None = None,
        builder: RouteBuilder | None = None,
        sleep: Sleeper = asyncio.sleep,
        default_policy: RetryPolicy | None = None,
        on_attempt: AttemptHook | None = None,
    ) -> None:
        self._registry = registry
        self._sessions = sessions or RandomSessionGenerator()
        self._builder = builder or RouteBuilder()
        self._sleep = sleep
        self._default_policy = default_policy or RetryPolicy()
        self._on_attempt = on_attempt

    @property
    def default_policy(self) -> RetryPolicy:
        return self._default_policy

    # ── Main entry-point ─────────────────────────────────────
    async def run_with_fallback(
        self,
        fetch: FetchOperation[T],
        policy: RetryPolicy | None = None,
    ) -> T:
        """Execute ``fetch`` with route rotation, backoff, and a final direct attempt.

        Raises:
            AllAttemptsExhausted: If every attempt and the direct fallback fail.
        """
        policy = policy or self._default_policy
        invocations = 0
        last_failure: FetchFailed | None = None

        for attempt in range(policy.max_attempts):
            log = logger.bind(attempt=attempt + 1, max_attempts=policy.max_attempts)

            # SELECTING
            providers = self._select(log)
            try:
                if providers:
                    provider = providers[attempt % len(providers)]
                    route = await self._build_route(provider, attempt)
                else:
                    log.info("egress_no_providers", state=OrchestratorState.SELECTING.value)
                    route = None

                # ATTEMPTING
                invocations += 1
                result = await self._invoke(fetch, attempt, route)
                EGRESS_CALLS_TOTAL.labels(result="success").inc()
                return result
            except FetchFailed as failure:
                last_failure = failure

            if attempt == policy.max_attempts - 1:
                break

            # BACKING_OFF
            delay_ms = policy.backoff_ms(attempt)
            log.info(
                "egress_backoff",
                state=OrchestratorState.BACKING_OFF.value,
                delay_ms=delay_ms,
                last_error=str(last_failure),
            )
            EGRESS_BACKOFF_SECONDS.observe(delay_ms / 1000)
            await self._sleep(delay_ms / 1000)

        # EXHAUSTED → FALLBACK_DIRECT
        logger.warning(
            "egress_exhausted_trying_direct",
            state=OrchestratorState.FALLBACK_DIRECT.value,
            attempts=policy.max_attempts,
            last_error=str(last_failure),
        )
        invocations += 1
        try:
            result = await self._invoke(fetch, policy.max_attempts, None)
        except FetchFailed as direct_failure:
            EGRESS_CALLS_TOTAL.labels(result="exhausted").inc()
            logger.error(
                "egress_all_attempts_failed",
                state=OrchestratorState.FAILED.value,
                invocations=invocations,
                error=str(direct_failure),
            )
            raise AllAttemptsExhausted(direct_failure, attempts=invocations) from direct_failure.cause

        EGRESS_CALLS_TOTAL.labels(result="fallback_success").inc()
        return result

    # ── Attempt steps ────────────────────────────────────────
    def _select(self, log: Any) -> list[ProviderDefinition]:
        """Enabled providers; an unreadable configuration means direct for this attempt."""
        try:
            return self._registry.list_enabled()
        except Exception as exc:
            log.error(
                "egress_selection_failed",
                state=OrchestratorState.SELECTING.value,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []

    async def _build_route(self, provider: ProviderDefinition, attempt: int) -> RouteDescriptor:
        """Fresh session + route for ``provider``; raises FetchFailed if none can be built."""
        token = self._sessions.new_session_token()
        try:
            route = await self._builder.build(provider, token, attempt_index=attempt)
        except Exception as exc:
            route = None
            cause: Exception = exc
        else:
            cause = RouteConstructionFailed(provider.name, "no route available")

        if route is None:
            failure = FetchFailed(attempt, provider.name, cause)
            logger.warning(
                "egress_route_unavailable",
                attempt=attempt + 1,
                provider=provider.name,
                error=str(failure),
            )
            EGRESS_ATTEMPTS_TOTAL.labels(provider=provider.name, outcome="no_route").inc()
            self._record(
                AttemptOutcome(
                    attempt_index=attempt,
                    route=None,
                    succeeded=False,
                    error=str(failure),
                    provider_name=provider.name,
                )
            )
            raise failure
        return route

    async def _invoke(
        self,
        fetch: FetchOperation[T],
        attempt: int,
        route: RouteDescriptor | None,
    ) -> T:
        provider_name = route.provider_name if route else "direct"
        log = logger.bind(
            attempt=attempt + 1,
            provider=provider_name,
            session=route.session_token if route else None,
        )
        log.info(
            "egress_attempt",
            state=OrchestratorState.ATTEMPTING.value,
            route=route.redacted_url if route else None,
        )

        start = time.monotonic()
        try:
            result = await fetch(route)
        except Exception as exc:
            latency_ms = (time.monotonic() - start) * 1000
            failure = FetchFailed(attempt, provider_name, exc)
            EGRESS_ATTEMPTS_TOTAL.labels(provider=provider_name, outcome="failure").inc()
            self._record(
                AttemptOutcome(
                    attempt_index=attempt,
                    route=route,
                    succeeded=False,
                    error=str(failure),
                    provider_name=provider_name,
                    latency_ms=latency_ms,
                )
            )
            log.warning(
                "egress_attempt_failed",
                error=str(failure),
                latency_ms=round(latency_ms, 1),
            )
            raise failure from exc

        latency_ms = (time.monotonic() - start) * 1000
        EGRESS_ATTEMPTS_TOTAL.labels(provider=provider_name, outcome="success").inc()
        self._record(
            AttemptOutcome(
                attempt_index=attempt,
                route=route,
                succeeded=True,
                provider_name=provider_name,
                latency_ms=latency_ms,
            )
        )
        log.info(
            "egress_attempt_succeeded",
            state=OrchestratorState.SUCCEEDED.value,
            latency_ms=round(latency_ms, 1),
        )
        return result

    def _record(self, outcome: AttemptOutcome) -> None:
        if self._on_attempt is not None:
            self._on_attempt(outcome)
