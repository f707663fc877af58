"""Prometheus metrics for the interview AI orchestrator."""

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
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Provider metrics ─────────────────────────────────────────
PROVIDER_CALLS = Counter(
    "ai_provider_calls_total",
    "Provider invocations",
    ["capability", "provider", "outcome"],
)

PROVIDER_LATENCY = Histogram(
    "ai_provider_latency_seconds",
    "Provider response latency",
    ["provider"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

BREAKER_TRIPS = Counter(
    "ai_provider_breaker_trips_total",
    "Providers taken out of rotation after a failed call",
    ["provider"],
)

FALLBACKS_SERVED = Counter(
    "ai_fallbacks_served_total",
    "Requests answered with canned content",
    ["capability"],
)

# ── Credit metrics ───────────────────────────────────────────
USAGE_RECORDS = Counter(
    "ai_usage_records_total",
    "Usage rows written after successful provider calls",
    ["provider"],
)

PROVIDER_EXHAUSTIONS = Counter(
    "ai_provider_exhausted_total",
    "Providers that crossed a daily or monthly limit",
    ["provider", "reason"],
)
