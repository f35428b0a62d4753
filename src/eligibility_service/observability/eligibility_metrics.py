"""Prometheus metrics for eligibility aggregation."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from eligibility_service.config import settings


UPSTREAM_CALLS_TOTAL = Counter(
    "eligibility_upstream_calls_total",
    "Upstream eligibility inquiries by kind (general/procedure) and outcome",
    ["kind", "outcome"],
)

UPSTREAM_LATENCY_SECONDS = Histogram(
    "eligibility_upstream_latency_seconds",
    "Latency of upstream eligibility inquiries",
    ["kind"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 20, 30),
)

SHORT_CIRCUITS_TOTAL = Counter(
    "eligibility_short_circuits_total",
    "Procedures answered from the general benefit without a per-code inquiry",
)

FALLBACK_TOTAL = Counter(
    "eligibility_fallback_total",
    "Synthetic reports served, by reason",
    ["reason"],
)

REPORTS_TOTAL = Counter(
    "eligibility_reports_total",
    "Reports returned to callers",
    ["synthetic"],
)


def _enabled() -> bool:
    """Check whether metrics are enabled."""
    return bool(settings.metrics_enabled)


def record_upstream_call(kind: str, outcome: str, latency_seconds: float) -> None:
    """Record one upstream inquiry."""
    if not _enabled():
        return

    UPSTREAM_CALLS_TOTAL.labels(kind=kind, outcome=outcome).inc()
    UPSTREAM_LATENCY_SECONDS.labels(kind=kind).observe(max(latency_seconds, 0.0))


def record_short_circuit(count: int = 1) -> None:
    if not _enabled():
        return

    SHORT_CIRCUITS_TOTAL.inc(count)


def record_fallback(reason: str) -> None:
    """Record fallback usage."""
    if not _enabled():
        return

    FALLBACK_TOTAL.labels(reason=reason).inc()


def record_report(synthetic: bool) -> None:
    if not _enabled():
        return

    REPORTS_TOTAL.labels(synthetic=str(bool(synthetic)).lower()).inc()
