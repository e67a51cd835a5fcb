"""Tests for the simulated orders backend."""

import random

import pytest

from payments_service.orders import ORDERS, simulate_latency
from tests.conftest import sample_value


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.mark.asyncio
async def test_orders_returned_after_delay_within_bounds():
    sleep = RecordingSleep()

    items = await simulate_latency("orders", min_ms=100, max_ms=200, sleep=sleep, rng=random.Random(7))

    assert items == ORDERS
    assert len(sleep.calls) == 1
    assert 0.1 <= sleep.calls[0] <= 0.2


@pytest.mark.asyncio
async def test_returned_items_are_copies():
    items = await simulate_latency("orders", min_ms=0, max_ms=0, sleep=RecordingSleep())
    items[0]["status"] = "tampered"

    assert ORDERS[0]["status"] != "tampered"


@pytest.mark.asyncio
async def test_unknown_operation_returns_empty_list():
    sleep = RecordingSleep()

    assert await simulate_latency("refunds", min_ms=5, max_ms=5, sleep=sleep) == []
    assert sleep.calls == [0.005]


@pytest.mark.asyncio
async def test_latency_observed_in_histogram():
    before = sample_value("simulated_latency_seconds_count", {"operation": "orders"})

    await simulate_latency("orders", min_ms=0, max_ms=0, sleep=RecordingSleep())

    assert sample_value("simulated_latency_seconds_count", {"operation": "orders"}) == before + 1


@pytest.mark.asyncio
async def test_inverted_bounds_rejected():
    with pytest.raises(ValueError):
        await simulate_latency("orders", min_ms=300, max_ms=100, sleep=RecordingSleep())
