"""
API routes: health, orders, payments and the Prometheus scrape endpoint.
"""
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status

from ..config import Settings
from ..observability.metrics import render_latest
from ..orders import simulate_latency
from ..payments import (
    DuplicatePaymentError,
    PaymentNotFoundError,
    PaymentService,
    PaymentValidationError,
)
from .schemas import HealthResponse, MessageResponse, OrdersResponse, PaymentResponse

logger = structlog.get_logger(__name__)

INVALID_PAYLOAD = "Invalid payload"
PAYMENT_NOT_FOUND = "Payment not found"
PAYMENT_ALREADY_PROCESSED = "Payment already processed"

PAYMENTS_PREFIX = "/api/v1/payments"

# Create routers
monitoring_router = APIRouter(tags=["monitoring"])
orders_router = APIRouter(prefix="/api/v1/orders", tags=["orders"])
payment_router = APIRouter(prefix=PAYMENTS_PREFIX, tags=["payments"])


# Dependency injection
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_payment_service(request: Request) -> PaymentService:
    service = getattr(request.app.state, "payment_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Payment service not initialized")
    return service


@monitoring_router.get("/healthz", response_model=HealthResponse)
async def healthz(settings: Settings = Depends(get_app_settings)) -> Dict[str, str]:
    """Liveness probe. Does not check dependencies (there are none)."""
    return {"status": "ok", "service": settings.app_name}


@monitoring_router.get("/ping", response_model=MessageResponse)
async def ping() -> Dict[str, str]:
    """Cheapest possible endpoint, used as the load-test target."""
    return {"message": "pong"}


@monitoring_router.get("/metrics", include_in_schema=False)
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    content, content_type = render_latest()
    return Response(content=content, media_type=content_type)


@orders_router.get("", response_model=OrdersResponse)
async def list_orders(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    """List demo orders after a simulated backend delay."""
    items = await simulate_latency(
        "orders",
        min_ms=settings.orders_latency_min_ms,
        max_ms=settings.orders_latency_max_ms,
    )
    return {"data": items, "meta": {"total": len(items)}}


@payment_router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    responses={404: {"model": MessageResponse}},
)
async def get_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Fetch a payment by id."""
    try:
        payment = service.get_payment(payment_id)
    except PaymentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PAYMENT_NOT_FOUND)
    return {"data": payment}


@payment_router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}, 409: {"model": MessageResponse}},
    summary="Create a payment",
    description="Create a payment for an order. An order can only be paid once.",
)
async def create_payment(
    payload: Optional[Dict[str, Any]] = Body(
        default=None,
        examples=[{"orderId": "ord_1001", "amount": 149.9}],
    ),
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Create a payment; extra payload fields are stored on the record."""
    try:
        payment = service.create_payment(payload)
    except PaymentValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_PAYLOAD)
    except DuplicatePaymentError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PAYMENT_ALREADY_PROCESSED)
    return {"data": payment}
