"""Payment processing errors."""


class PaymentError(Exception):
    """Base exception for payment processing errors."""

    pass


class PaymentValidationError(PaymentError):
    """Raised when payment input validation fails."""

    pass


class DuplicatePaymentError(PaymentError):
    """Raised when a payment for the same order already exists."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Payment already processed for order {order_id}")
        self.order_id = order_id


class PaymentNotFoundError(PaymentError):
    """Raised when a payment id is unknown."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(f"Payment not found: {payment_id}")
        self.payment_id = payment_id
