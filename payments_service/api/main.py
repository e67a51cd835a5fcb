"""
Main FastAPI application.

Payments demo API with:
- Request ID tracking and structured logging
- Prometheus metrics on /metrics
- OpenTelemetry traces exported to the Collector
- Uniform ``{"message": ...}`` error bodies
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings, get_settings
from ..observability import initialize_observability, setup_logging, shutdown_observability
from ..observability.metrics import metrics
from ..observability.middleware import request_context_middleware, route_template
from ..payments import PaymentService
from .routes import (
    INVALID_PAYLOAD,
    PAYMENTS_PREFIX,
    monitoring_router,
    orders_router,
    payment_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, Any]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings
    logger.info(
        "server_started",
        app_name=settings.app_name,
        env=settings.app_env,
        port=settings.api_port,
        otel_enabled=settings.otel_enabled,
    )

    yield

    logger.info("application_shutdown")
    shutdown_observability()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Bodies FastAPI rejects (malformed JSON, non-object) never reach the service
    if request.method == "POST" and route_template(request) == PAYMENTS_PREFIX:
        metrics.record_payment_rejected("invalid")
    logger.warning("request_validation_failed", errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": INVALID_PAYLOAD},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.
    """
    logger.error(
        "unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def create_app(
    settings: Optional[Settings] = None,
    payment_service: Optional[PaymentService] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to environment settings)
        payment_service: Service instance to serve (defaults to a fresh in-memory one)
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Payments Service",
        description="Payments demo API instrumented with OpenTelemetry, structlog and Prometheus.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.payment_service = payment_service or PaymentService(tracer_name=settings.app_name)

    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(monitoring_router)
    app.include_router(orders_router)
    app.include_router(payment_router)

    initialize_observability(settings, app=app)
    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    try:
        uvicorn.run(
            "payments_service.api.main:create_app",
            factory=True,
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower(),
        )
    except Exception:
        logger.exception("server_failed_to_start")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
