"""
OpenTelemetry Instrumentation Setup

Initializes:
- Tracing: TracerProvider -> BatchSpanProcessor -> OTLP/HTTP -> Collector
- Metrics: MeterProvider -> PeriodicExportingMetricReader -> OTLP/HTTP -> Collector
- Auto-instrumentation for FastAPI (inbound) and requests (outbound)

Prometheus business metrics live in ``metrics.py`` and are scraped from
/metrics; the OTel metric pipeline carries the auto-instrumented HTTP
metrics to the Collector.

FAILURE MODE:
If the Collector is unreachable, the batch processor drops spans after its
retries and the service keeps serving. Exporter construction errors are
logged and leave the provider without an exporter.
"""
from typing import Any, Dict, Optional

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ..config import Settings, get_settings

logger = structlog.get_logger(__name__)

# Providers created by this process. The global OTel providers can only be set
# once, so after shutdown they stay registered and are never rebuilt.
_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None
_shut_down = False

# Endpoints that should not produce server spans
EXCLUDED_URLS = "metrics,healthz,ping"


def create_resource(settings: Settings, service_name: Optional[str] = None) -> Resource:
    """
    Creates an OpenTelemetry Resource with service metadata.

    These attributes are attached to every span and metric this process
    exports, which is how Jaeger/Grafana tell services apart.
    """
    return Resource(attributes={
        SERVICE_NAME: service_name or settings.app_name,
        SERVICE_VERSION: settings.app_version,
        DEPLOYMENT_ENVIRONMENT: settings.app_env,
    })


def setup_tracing(settings: Settings, service_name: Optional[str] = None) -> TracerProvider:
    """
    Initializes distributed tracing and registers the global tracer provider.

    Spans are buffered by a BatchSpanProcessor and pushed to
    ``<otlp_endpoint>/v1/traces`` in the background, so request handlers
    never block on export.
    """
    provider = TracerProvider(resource=create_resource(settings, service_name))

    try:
        exporter = OTLPSpanExporter(endpoint=settings.traces_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info("tracing_initialized", endpoint=settings.traces_endpoint)
    except Exception as e:
        logger.warning("tracing_exporter_failed", endpoint=settings.traces_endpoint, error=str(e))

    trace.set_tracer_provider(provider)
    return provider


def setup_metrics(settings: Settings, service_name: Optional[str] = None) -> MeterProvider:
    """Initializes the OTel metric pipeline (push every ``otel_export_interval_ms``)."""
    readers = []
    try:
        exporter = OTLPMetricExporter(endpoint=settings.metrics_endpoint)
        readers.append(
            PeriodicExportingMetricReader(
                exporter, export_interval_millis=settings.otel_export_interval_ms
            )
        )
        logger.info("metrics_initialized", endpoint=settings.metrics_endpoint)
    except Exception as e:
        logger.warning("metrics_exporter_failed", endpoint=settings.metrics_endpoint, error=str(e))

    provider = MeterProvider(
        resource=create_resource(settings, service_name), metric_readers=readers
    )
    metrics.set_meter_provider(provider)
    return provider


def initialize_observability(
    settings: Optional[Settings] = None,
    app: Any = None,
    service_name: Optional[str] = None,
) -> bool:
    """
    One-line setup for tracing, metrics and auto-instrumentation.

    Usage:
        app = FastAPI()
        initialize_observability(get_settings(), app=app)

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        app: FastAPI application to instrument, if any
        service_name: Overrides ``settings.app_name`` as service.name

    Returns:
        True if OTel export is active, False when disabled by configuration or
        after ``shutdown_observability`` (export is initialised once per process)
    """
    global _tracer_provider, _meter_provider

    settings = settings or get_settings()
    if not settings.otel_enabled:
        logger.info("observability_disabled")
        return False

    if _shut_down:
        # Spans would go to the shut-down global provider and be dropped
        logger.warning("observability_already_shut_down")
        return False

    if _tracer_provider is None:
        _tracer_provider = setup_tracing(settings, service_name)
        _meter_provider = setup_metrics(settings, service_name)

    if app is not None:
        FastAPIInstrumentor.instrument_app(
            app,
            excluded_urls=EXCLUDED_URLS,
            tracer_provider=_tracer_provider,
            meter_provider=_meter_provider,
        )

    requests_instrumentor = RequestsInstrumentor()
    if not requests_instrumentor.is_instrumented_by_opentelemetry:
        requests_instrumentor.instrument(tracer_provider=_tracer_provider)

    logger.info("observability_initialized", service_name=service_name or settings.app_name)
    return True


def shutdown_observability() -> None:
    """
    Flush and shut down the providers created by ``initialize_observability``.

    The providers stay registered as the global ones; later calls are no-ops.
    """
    global _shut_down

    if _shut_down or _tracer_provider is None:
        return

    _tracer_provider.shutdown()
    if _meter_provider is not None:
        _meter_provider.shutdown()
    _shut_down = True


def get_trace_context() -> Dict[str, str]:
    """
    Extract current trace ID and span ID for correlation.

    Returns:
        Dict with trace_id and span_id (or empty if no active trace)
    """
    span = trace.get_current_span()
    ctx = span.get_span_context()

    if ctx.is_valid:
        return {
            "trace_id": format(ctx.trace_id, "032x"),
            "span_id": format(ctx.span_id, "016x"),
        }
    return {}
