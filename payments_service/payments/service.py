"""
Payment service.

Flow for a new payment:
1. Validate the payload (orderId and a positive amount are required)
2. Reject orders that already have a payment
3. Open the ``create_payment`` span
4. Build and store the record atomically
5. Log, count, and close the span
"""
import math
import time
from numbers import Real
from threading import Lock
from typing import Any, Callable, List, Mapping, Optional

import structlog
from opentelemetry import trace

from ..observability.metrics import metrics
from .exceptions import DuplicatePaymentError, PaymentNotFoundError, PaymentValidationError
from .store import PaymentRecord, PaymentStore

logger = structlog.get_logger(__name__)

PAYMENT_ID_PREFIX = "pay_"


def validate_payload(payload: Any) -> None:
    """
    Check a create-payment payload.

    Raises:
        PaymentValidationError: If orderId or amount is missing or unusable
    """
    if not isinstance(payload, Mapping):
        raise PaymentValidationError("Payload must be a JSON object")

    order_id = payload.get("orderId")
    if not isinstance(order_id, str) or not order_id.strip():
        raise PaymentValidationError("orderId is required")

    amount = payload.get("amount")
    # bool is a Real subclass; reject it explicitly. NaN and infinities parse from JSON too.
    if (
        isinstance(amount, bool)
        or not isinstance(amount, Real)
        or not math.isfinite(amount)
        or amount <= 0
    ):
        raise PaymentValidationError("amount must be a positive number")


class PaymentService:
    """In-memory payment creation and lookup, traced and metered."""

    def __init__(
        self,
        store: Optional[PaymentStore] = None,
        tracer_name: str = "payments-service",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else PaymentStore()
        self.tracer_name = tracer_name
        self._clock = clock
        self._id_lock = Lock()
        self._last_id_ms = 0

    def _next_payment_id(self) -> str:
        # Millisecond timestamp ids; bump past the last one if the clock hasn't moved.
        with self._id_lock:
            now_ms = int(self._clock() * 1000)
            if now_ms <= self._last_id_ms:
                now_ms = self._last_id_ms + 1
            self._last_id_ms = now_ms
        return f"{PAYMENT_ID_PREFIX}{now_ms}"

    def create_payment(self, payload: Mapping[str, Any]) -> PaymentRecord:
        """
        Create and store a payment for ``payload["orderId"]``.

        Every key of the payload is kept on the record; ``id`` is always
        server-generated.

        Raises:
            PaymentValidationError: Invalid payload
            DuplicatePaymentError: The order already has a payment
        """
        try:
            validate_payload(payload)
        except PaymentValidationError as e:
            metrics.record_payment_rejected("invalid")
            logger.warning("payment_rejected_invalid", error=str(e))
            raise

        order_id = payload["orderId"]
        if self.store.find_by_order_id(order_id) is not None:
            metrics.record_payment_rejected("duplicate")
            logger.info("payment_rejected_duplicate", order_id=order_id)
            raise DuplicatePaymentError(order_id)

        tracer = trace.get_tracer(self.tracer_name)
        with tracer.start_as_current_span("create_payment") as span:
            span.set_attribute("orderId", order_id)
            span.set_attribute("amount", payload["amount"])

            record: PaymentRecord = {"id": self._next_payment_id()}
            record.update((k, v) for k, v in payload.items() if k != "id")

            try:
                self.store.add_unique(record)
            except DuplicatePaymentError:
                # Lost the race against a concurrent request for the same order
                metrics.record_payment_rejected("duplicate")
                logger.info("payment_rejected_duplicate", order_id=order_id)
                raise

            span.set_attribute("paymentId", record["id"])
            logger.info("payment_processed", payment=record)
            metrics.record_payment_created(float(payload["amount"]))

        return record

    def get_payment(self, payment_id: str) -> PaymentRecord:
        """
        Raises:
            PaymentNotFoundError: Unknown payment id
        """
        payment = self.store.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    def list_payments(self) -> List[PaymentRecord]:
        return self.store.all()
