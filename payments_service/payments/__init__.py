"""In-memory payments domain: store, service and errors."""
from .exceptions import (
    DuplicatePaymentError,
    PaymentError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from .service import PaymentService
from .store import PaymentStore

__all__ = [
    "DuplicatePaymentError",
    "PaymentError",
    "PaymentNotFoundError",
    "PaymentService",
    "PaymentStore",
    "PaymentValidationError",
]
