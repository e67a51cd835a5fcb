"""
Demo order catalogue with simulated downstream latency.

There is no orders backend; ``simulate_latency`` stands in for one by
sleeping a random amount of time before returning canned data.
"""
import asyncio
import copy
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from .observability.metrics import metrics

logger = structlog.get_logger(__name__)

ORDERS: List[Dict[str, Any]] = [
    {
        "id": "ord_1001",
        "customerId": "cus_001",
        "amount": 149.9,
        "currency": "BRL",
        "status": "paid",
        "createdAt": "2025-01-06T10:00:00Z",
    },
    {
        "id": "ord_1002",
        "customerId": "cus_002",
        "amount": 89.0,
        "currency": "BRL",
        "status": "pending",
        "createdAt": "2025-01-06T10:05:00Z",
    },
    {
        "id": "ord_1003",
        "customerId": "cus_001",
        "amount": 420.5,
        "currency": "BRL",
        "status": "pending",
        "createdAt": "2025-01-06T10:12:00Z",
    },
    {
        "id": "ord_1004",
        "customerId": "cus_003",
        "amount": 35.0,
        "currency": "BRL",
        "status": "cancelled",
        "createdAt": "2025-01-06T10:20:00Z",
    },
]

_DATASETS: Dict[str, List[Dict[str, Any]]] = {"orders": ORDERS}


async def simulate_latency(
    operation: str,
    min_ms: int = 50,
    max_ms: int = 300,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """
    Wait a uniformly random ``[min_ms, max_ms]`` delay, then return the data for ``operation``.

    Unknown operations still wait and return an empty list. The returned
    items are copies, so callers may mutate them freely.
    """
    if max_ms < min_ms:
        raise ValueError("max_ms must be >= min_ms")

    delay_seconds = (rng or random).uniform(min_ms, max_ms) / 1000.0
    await sleep(delay_seconds)
    metrics.record_simulated_latency(operation, delay_seconds)

    items = copy.deepcopy(_DATASETS.get(operation, []))
    logger.debug("latency_simulated", operation=operation, delay_ms=round(delay_seconds * 1000.0, 2))
    return items
