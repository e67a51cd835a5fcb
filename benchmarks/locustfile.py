"""
Locust load testing file for the payments service.

Usage:
    locust -f benchmarks/locustfile.py --host=http://localhost:3000

Then open http://localhost:8089 to configure and run load tests.

Headless (CI):
    locust -f benchmarks/locustfile.py --host=http://localhost:3000 \\
           --users 50 --spawn-rate 10 --run-time 2m --headless
"""

import random
import uuid

from locust import HttpUser, between, constant, task


class PingUser(HttpUser):
    """Baseline: one ping per second per user."""

    wait_time = constant(1)

    @task
    def ping(self):
        self.client.get("/ping", name="ping")


class PaymentsUser(HttpUser):
    """Simulated client browsing orders and paying for them."""

    wait_time = between(0.5, 2)

    def on_start(self):
        """Initialize user session."""
        self.session_prefix = uuid.uuid4().hex[:8]
        self.order_counter = 0
        self.paid_orders = []

    def generate_order_id(self):
        """Order ids are unique per user session so creates don't collide."""
        self.order_counter += 1
        return f"ord_load_{self.session_prefix}_{self.order_counter}"

    @task(5)
    def list_orders(self):
        with self.client.get("/api/v1/orders", catch_response=True, name="list_orders") as response:
            if response.status_code == 200 and "meta" in response.json():
                response.success()
            else:
                response.failure(f"Got status code: {response.status_code}")

    @task(3)
    def create_and_fetch_payment(self):
        payload = {
            "orderId": self.generate_order_id(),
            "amount": random.randint(50, 549),
        }

        with self.client.post(
            "/api/v1/payments",
            json=payload,
            catch_response=True,
            name="create_payment",
        ) as response:
            if response.status_code != 201:
                response.failure(f"Got status code: {response.status_code}")
                return
            response.success()
            payment_id = response.json()["data"]["id"]
            self.paid_orders.append(payload["orderId"])

        with self.client.get(
            f"/api/v1/payments/{payment_id}",
            catch_response=True,
            name="get_payment",
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Got status code: {response.status_code}")

    @task(1)
    def duplicate_payment(self):
        """Re-submitting a paid order must be rejected with 409."""
        if not self.paid_orders:
            return

        payload = {"orderId": random.choice(self.paid_orders), "amount": 100}
        with self.client.post(
            "/api/v1/payments",
            json=payload,
            catch_response=True,
            name="create_payment_duplicate",
        ) as response:
            if response.status_code == 409:
                response.success()
            else:
                response.failure(f"Expected 409, got: {response.status_code}")

    @task(1)
    def health_check(self):
        with self.client.get("/healthz", catch_response=True, name="health_check") as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Got status code: {response.status_code}")


# Performance thresholds to watch during load tests:
# - P95 latency < 50ms for ping and payment endpoints
# - list_orders latency tracks the configured simulated latency window
# - Zero non-409 failures on payment creation
