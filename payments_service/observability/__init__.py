"""
Observability package.

Traces go to the OTel Collector over OTLP/HTTP, business and HTTP metrics
are exposed for Prometheus on /metrics, and logs are JSON on stdout with
trace_id/span_id attached whenever a span is active.
"""
from .instrumentation import get_trace_context, initialize_observability, shutdown_observability
from .logging_config import get_logger, setup_logging
from .metrics import metrics

__all__ = [
    "get_logger",
    "get_trace_context",
    "initialize_observability",
    "metrics",
    "setup_logging",
    "shutdown_observability",
]
