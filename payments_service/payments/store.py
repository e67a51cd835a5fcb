"""
Process-local payment store.

Records live in an ordered list and are lost on restart. The duplicate
check and the append happen under one lock so two concurrent requests for
the same order cannot both be stored.
"""
from threading import Lock
from typing import Any, Dict, List, Optional

from .exceptions import DuplicatePaymentError

PaymentRecord = Dict[str, Any]


class PaymentStore:
    """Thread-safe, in-memory list of payment records (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._payments: List[PaymentRecord] = []

    def get(self, payment_id: str) -> Optional[PaymentRecord]:
        with self._lock:
            return next((p for p in self._payments if p.get("id") == payment_id), None)

    def find_by_order_id(self, order_id: Any) -> Optional[PaymentRecord]:
        with self._lock:
            return self._find_by_order_id(order_id)

    def add_unique(self, record: PaymentRecord) -> PaymentRecord:
        """
        Append ``record`` unless a payment for its ``orderId`` already exists.

        Raises:
            DuplicatePaymentError: If the order already has a payment
        """
        order_id = record.get("orderId")
        with self._lock:
            if self._find_by_order_id(order_id) is not None:
                raise DuplicatePaymentError(order_id)
            self._payments.append(record)
        return record

    def all(self) -> List[PaymentRecord]:
        with self._lock:
            return list(self._payments)

    def clear(self) -> None:
        """Drop every record (used by tests)."""
        with self._lock:
            self._payments.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._payments)

    def _find_by_order_id(self, order_id: Any) -> Optional[PaymentRecord]:
        return next((p for p in self._payments if p.get("orderId") == order_id), None)
