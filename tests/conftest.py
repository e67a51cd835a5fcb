"""
Pytest configuration and fixtures.
"""
import os
from typing import Any, AsyncGenerator, Optional

# Keep OTLP export off for anything that reads settings from the environment.
os.environ.setdefault("OTEL_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import REGISTRY

from payments_service.api.main import create_app
from payments_service.config import Settings
from payments_service.payments import PaymentService, PaymentStore

# The global tracer provider can only be set once per process.
_span_exporter = InMemorySpanExporter()
_tracer_provider = TracerProvider()
_tracer_provider.add_span_processor(SimpleSpanProcessor(_span_exporter))
trace.set_tracer_provider(_tracer_provider)


def sample_value(name: str, labels: Optional[dict] = None) -> float:
    """Current value of a Prometheus sample (0.0 if never observed)."""
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """In-memory exporter receiving every finished span, cleared per test."""
    _span_exporter.clear()
    yield _span_exporter
    _span_exporter.clear()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        app_name="payments-service-test",
        app_env="test",
        log_level="DEBUG",
        otel_enabled=False,
        orders_latency_min_ms=0,
        orders_latency_max_ms=0,
    )


@pytest.fixture
def payment_store() -> PaymentStore:
    return PaymentStore()


@pytest.fixture
def payment_service(payment_store: PaymentStore) -> PaymentService:
    return PaymentService(store=payment_store, tracer_name="payments-service-test")


@pytest.fixture
def app(test_settings: Settings, payment_service: PaymentService):
    return create_app(test_settings, payment_service=payment_service)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_payment_data() -> dict:
    """Sample payment request data."""
    return {"orderId": "ord_test_123", "amount": 150}
