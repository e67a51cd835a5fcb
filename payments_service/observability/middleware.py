"""
Request context middleware.

Binds a request id into the structlog context, echoes it as X-Request-ID,
and records per-route HTTP metrics.
"""
import time
import uuid
from typing import Awaitable, Callable

import structlog
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from .metrics import metrics

logger = structlog.get_logger("access")

REQUEST_ID_HEADER = "X-Request-ID"

# The scrape endpoint is not self-observed
EXCLUDED_METRIC_PATHS = frozenset({"/metrics"})

UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """
    Resolve the route template for a request (e.g. ``/api/v1/payments/{payment_id}``).

    Raw paths would give every payment id its own time series.
    """
    route = request.scope.get("route")
    if route is not None and hasattr(route, "path"):
        return route.path

    for candidate in request.app.router.routes:
        match, _ = candidate.matches(request.scope)
        if match == Match.FULL and hasattr(candidate, "path"):
            return candidate.path
    return UNMATCHED_ROUTE


async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    path = request.url.path
    start_time = time.perf_counter()
    status_code = 500

    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=path,
    )

    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    except Exception as e:
        logger.error("request_failed", error=str(e), error_type=type(e).__name__)
        raise

    finally:
        duration = time.perf_counter() - start_time
        if path not in EXCLUDED_METRIC_PATHS:
            metrics.record_http_request(request.method, route_template(request), status_code, duration)

        logger.info(
            "request_completed",
            status_code=status_code,
            duration_ms=round(duration * 1000.0, 2),
        )
        structlog.contextvars.clear_contextvars()
