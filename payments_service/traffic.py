"""
Synthetic payment traffic generator.

Posts a new payment every few seconds so traces, logs and metrics have
something to show. Each request runs inside a ``simulate-payment`` span and
carries the W3C trace context, so the client span and the server's
``create_payment`` span join into one trace.

Usage:
    payments-traffic --base-url http://localhost:3001 --interval 5
"""
import random
import time
from typing import Callable, Optional

import requests
import structlog
import typer
from opentelemetry import propagate, trace
from rich.console import Console

from .config import get_settings
from .observability import initialize_observability, setup_logging, shutdown_observability

logger = structlog.get_logger(__name__)

TRACER_NAME = "payments-test-tracer"
PAYMENTS_PATH = "/api/v1/payments"

app = typer.Typer(
    name="payments-traffic",
    help="Generate synthetic payment traffic against the payments service",
    add_completion=False,
)

console = Console()


def random_amount(rng: Optional[random.Random] = None) -> int:
    """Whole amount in [50, 549]."""
    return (rng or random).randint(50, 549)


def send_payment(
    session: requests.Session,
    base_url: str,
    order_id: str,
    amount: int,
    timeout: float = 5.0,
) -> bool:
    """
    POST one payment inside a ``simulate-payment`` span.

    Returns:
        True if the service accepted the payment, False on any HTTP or
        connection error (logged, never raised)
    """
    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span("simulate-payment") as span:
        span.set_attribute("orderId", order_id)
        span.set_attribute("amount", amount)

        headers = {}
        propagate.inject(headers)

        try:
            response = session.post(
                f"{base_url.rstrip('/')}{PAYMENTS_PATH}",
                json={"orderId": order_id, "amount": amount},
                headers=headers,
                timeout=timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            span.record_exception(e)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            logger.warning("payment_send_failed", order_id=order_id, amount=amount, error=str(e))
            return False

        span.set_attribute("http.status_code", response.status_code)
        logger.info("payment_sent", order_id=order_id, amount=amount)
        return True


def run(
    base_url: str,
    interval: float = 5.0,
    count: Optional[int] = None,
    start: int = 1,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Send payments ``ord_auto_<n>`` every ``interval`` seconds.

    Args:
        count: Stop after this many payments (runs forever when None)
        start: First order counter value

    Returns:
        Number of payments the service accepted
    """
    session = session or requests.Session()
    counter = start
    sent = 0
    accepted = 0

    while count is None or sent < count:
        sleep(interval)
        if send_payment(session, base_url, f"ord_auto_{counter}", random_amount(rng)):
            accepted += 1
        counter += 1
        sent += 1

    return accepted


@app.command()
def generate(
    base_url: str = typer.Option(
        "http://localhost:3001",
        "--base-url",
        "-u",
        help="Base URL of the payments service",
    ),
    interval: float = typer.Option(
        5.0,
        "--interval",
        "-i",
        min=0.0,
        help="Seconds between payments",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Number of payments to send (default: run until interrupted)",
    ),
    start: int = typer.Option(
        1,
        "--start",
        help="First order counter value",
    ),
) -> None:
    """Send a payment every INTERVAL seconds."""
    settings = get_settings()
    setup_logging(settings)
    initialize_observability(settings, service_name="payments-traffic-generator")

    console.print(f"[bold]Sending payments to[/bold] {base_url} every {interval:g}s")
    try:
        accepted = run(base_url, interval=interval, count=count, start=start)
        console.print(f"[green]Done:[/green] {accepted} payment(s) accepted")
    except KeyboardInterrupt:
        console.print("[yellow]Stopped[/yellow]")
    finally:
        shutdown_observability()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
