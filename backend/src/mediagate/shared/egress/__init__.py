"""Multi-provider egress framework.

Selects a proxy route per fetch attempt, rotates session identity between
attempts, backs off on failure, and falls back to a direct attempt once
every routed attempt has failed.
"""

from mediagate.shared.egress.builder import RouteBuilder
from mediagate.shared.egress.errors import (
    AllAttemptsExhausted,
    ConfigurationIncomplete,
    EgressError,
    FetchFailed,
    RouteConstructionFailed,
)
from mediagate.shared.egress.orchestrator import RetryOrchestrator
from mediagate.shared.egress.registry import ProviderRegistry, ProviderSpec
from mediagate.shared.egress.session import RandomSessionGenerator
from mediagate.shared.egress.types import (
    AttemptOutcome,
    ProviderDefinition,
    RetryPolicy,
    RouteDescriptor,
    RouteKind,
)

__all__ = [
    "AllAttemptsExhausted",
    "AttemptOutcome",
    "ConfigurationIncomplete",
    "EgressError",
    "FetchFailed",
    "ProviderDefinition",
    "ProviderRegistry",
    "ProviderSpec",
    "RandomSessionGenerator",
    "RetryOrchestrator",
    "RetryPolicy",
    "RouteBuilder",
    "RouteConstructionFailed",
    "RouteDescriptor",
    "RouteKind",
]
