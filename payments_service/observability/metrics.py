"""
Prometheus metrics for the payments service.

Tracks:
- Payments created and payment request outcomes
- Payment amounts
- HTTP request counts and latency per route template
- Simulated downstream latency
"""
from typing import Tuple

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest

# Payment metrics
payments_created_total = Counter(
    "payments_created_total",
    "Total payments created",
)

payment_requests_total = Counter(
    "payment_requests_total",
    "Total payment creation requests by outcome",
    ["outcome"],  # created, duplicate, invalid
)

payment_amount = Histogram(
    "payment_amount",
    "Amount of created payments",
    buckets=(10, 50, 100, 250, 500, 1000, 5000, 10000),
)

# HTTP metrics
# Labelled by route template (/api/v1/payments/{payment_id}), never the raw path.
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

simulated_latency_seconds = Histogram(
    "simulated_latency_seconds",
    "Artificial latency injected per operation",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.2, 0.3, 0.5, 1.0, 2.0),
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_payment_created(amount: float) -> None:
        """Record a successfully created payment."""
        payments_created_total.inc()
        payment_requests_total.labels(outcome="created").inc()
        payment_amount.observe(amount)

    @staticmethod
    def record_payment_rejected(outcome: str) -> None:
        """Record a rejected payment request (duplicate or invalid)."""
        payment_requests_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_http_request(method: str, route: str, status: int, duration_seconds: float) -> None:
        """Record an HTTP request."""
        http_requests_total.labels(method=method, route=route, status=str(status)).inc()
        http_request_duration_seconds.labels(method=method, route=route).observe(duration_seconds)

    @staticmethod
    def record_simulated_latency(operation: str, duration_seconds: float) -> None:
        simulated_latency_seconds.labels(operation=operation).observe(duration_seconds)


def render_latest() -> Tuple[bytes, str]:
    """Render the default registry in the Prometheus text format."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


# Export singleton instance
metrics = MetricsCollector()
