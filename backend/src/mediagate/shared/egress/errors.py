"""Error taxonomy of the egress layer.

Only ``AllAttemptsExhausted`` is raised to callers of the orchestrator; the
rest are produced and consumed inside a single orchestrated call.
"""

from __future__ import annotations

from mediagate.shared.observability.redaction import redact_text


class EgressError(Exception):
    """Base class for egress-layer errors."""


class ConfigurationIncomplete(EgressError):
    """A registered provider lacks parameters and is therefore disabled."""

    def __init__(self, provider: str, missing: tuple[str, ...]) -> None:
        self.provider = provider
        self.missing = missing
        super().__init__(f"Provider {provider!r} missing: {', '.join(missing)}")


class RouteConstructionFailed(EgressError):
    """A provider could not produce a usable route for this attempt."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"Provider {provider!r} produced no route: {reason}")


class FetchFailed(EgressError):
    """One attempt failed, either in the fetch operation or while building its route."""

    def __init__(self, attempt_index: int, provider: str | None, cause: BaseException) -> None:
        self.attempt_index = attempt_index
        self.provider = provider or "direct"
        self.cause = cause
        super().__init__(
            f"Attempt {attempt_index + 1} via {self.provider} failed: "
            f"{type(cause).__name__}: {redact_text(str(cause))}"
        )

    @property
    def is_direct(self) -> bool:
        return self.provider == "direct"


class AllAttemptsExhausted(EgressError):
    """Every routed attempt and the final direct attempt failed."""

    def __init__(self, last_failure: FetchFailed, *, attempts: int) -> None:
        self.last_failure = last_failure
        self.attempts = attempts
        super().__init__(
            f"All {attempts} attempts failed; last: "
            f"{type(last_failure.cause).__name__}: {redact_text(str(last_failure.cause))}"
        )

    @property
    def last_cause(self) -> BaseException:
        return self.last_failure.cause
