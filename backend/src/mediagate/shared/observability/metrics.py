"""Prometheus metrics for the media gateway."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── HTTP metrics ─────────────────────────────────────────────
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

# ── Egress metrics ───────────────────────────────────────────
EGRESS_ATTEMPTS_TOTAL = Counter(
    "egress_attempts_total",
    "Fetch attempts by egress provider",
    ["provider", "outcome"],  # success / failure / no_route
)

EGRESS_BACKOFF_SECONDS = Histogram(
    "egress_backoff_seconds",
    "Backoff waited between failed attempts",
    buckets=(0.5, 1.0, 2.0, 4.0, 8.0, 10.0, 30.0),
)

EGRESS_CALLS_TOTAL = Counter(
    "egress_calls_total",
    "Orchestrated calls by final result",
    ["result"],  # success / fallback_success / exhausted
)

# ── Media metrics ────────────────────────────────────────────
MEDIA_DOWNLOADS_TOTAL = Counter(
    "media_downloads_total",
    "Completed media downloads",
    ["kind"],
)

DOWNLOADS_REMOVED_TOTAL = Counter(
    "downloads_removed_total",
    "Downloaded files removed by the janitor",
)
