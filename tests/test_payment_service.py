"""Tests for payment creation and lookup."""

import pytest

from payments_service.payments import (
    DuplicatePaymentError,
    PaymentNotFoundError,
    PaymentService,
    PaymentStore,
    PaymentValidationError,
)
from tests.conftest import sample_value


class FrozenClock:
    """Clock returning a fixed epoch time, in seconds."""

    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def frozen_service():
    return PaymentService(store=PaymentStore(), clock=FrozenClock(1736157600.5))


class TestCreatePayment:

    def test_creates_record_with_generated_id(self, frozen_service):
        payment = frozen_service.create_payment({"orderId": "ord_1", "amount": 100})

        assert payment == {"id": "pay_1736157600500", "orderId": "ord_1", "amount": 100}
        assert frozen_service.get_payment("pay_1736157600500") == payment

    def test_extra_fields_are_kept(self, payment_service):
        payment = payment_service.create_payment(
            {"orderId": "ord_1", "amount": 99.5, "currency": "BRL", "method": "pix"}
        )

        assert payment["currency"] == "BRL"
        assert payment["method"] == "pix"

    def test_client_supplied_id_is_ignored(self, frozen_service):
        payment = frozen_service.create_payment({"id": "evil", "orderId": "ord_1", "amount": 10})

        assert payment["id"] == "pay_1736157600500"

    def test_ids_unique_when_clock_does_not_advance(self, frozen_service):
        first = frozen_service.create_payment({"orderId": "ord_1", "amount": 10})
        second = frozen_service.create_payment({"orderId": "ord_2", "amount": 10})

        assert first["id"] == "pay_1736157600500"
        assert second["id"] == "pay_1736157600501"

    def test_duplicate_order_rejected(self, payment_service):
        payment_service.create_payment({"orderId": "ord_1", "amount": 10})

        with pytest.raises(DuplicatePaymentError):
            payment_service.create_payment({"orderId": "ord_1", "amount": 999})

        assert len(payment_service.list_payments()) == 1

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {},
            {"amount": 10},
            {"orderId": "", "amount": 10},
            {"orderId": "   ", "amount": 10},
            {"orderId": 123, "amount": 10},
            {"orderId": "ord_1"},
            {"orderId": "ord_1", "amount": 0},
            {"orderId": "ord_1", "amount": -5},
            {"orderId": "ord_1", "amount": "100"},
            {"orderId": "ord_1", "amount": True},
            {"orderId": "ord_1", "amount": None},
            {"orderId": "ord_1", "amount": float("nan")},
            {"orderId": "ord_1", "amount": float("inf")},
            {"orderId": "ord_1", "amount": float("-inf")},
        ],
    )
    def test_invalid_payloads_rejected(self, payment_service, payload):
        with pytest.raises(PaymentValidationError):
            payment_service.create_payment(payload)

        assert payment_service.list_payments() == []

    def test_span_recorded_with_attributes(self, payment_service, span_exporter):
        payment = payment_service.create_payment({"orderId": "ord_span", "amount": 250})

        spans = [s for s in span_exporter.get_finished_spans() if s.name == "create_payment"]
        assert len(spans) == 1
        assert spans[0].attributes["orderId"] == "ord_span"
        assert spans[0].attributes["amount"] == 250
        assert spans[0].attributes["paymentId"] == payment["id"]

    def test_no_span_for_rejected_requests(self, payment_service, span_exporter):
        payment_service.create_payment({"orderId": "ord_1", "amount": 10})
        span_exporter.clear()

        with pytest.raises(DuplicatePaymentError):
            payment_service.create_payment({"orderId": "ord_1", "amount": 10})
        with pytest.raises(PaymentValidationError):
            payment_service.create_payment({"orderId": "ord_2"})

        assert span_exporter.get_finished_spans() == ()

    def test_metrics_recorded(self, payment_service):
        created_before = sample_value("payments_created_total")
        duplicate_before = sample_value("payment_requests_total", {"outcome": "duplicate"})
        invalid_before = sample_value("payment_requests_total", {"outcome": "invalid"})
        amount_sum_before = sample_value("payment_amount_sum")

        payment_service.create_payment({"orderId": "ord_m1", "amount": 120})
        with pytest.raises(DuplicatePaymentError):
            payment_service.create_payment({"orderId": "ord_m1", "amount": 120})
        with pytest.raises(PaymentValidationError):
            payment_service.create_payment({"orderId": "ord_m2", "amount": 0})

        assert sample_value("payments_created_total") == created_before + 1
        assert sample_value("payment_requests_total", {"outcome": "duplicate"}) == duplicate_before + 1
        assert sample_value("payment_requests_total", {"outcome": "invalid"}) == invalid_before + 1
        assert sample_value("payment_amount_sum") == amount_sum_before + 120


class TestGetPayment:

    def test_unknown_payment(self, payment_service):
        with pytest.raises(PaymentNotFoundError) as exc_info:
            payment_service.get_payment("pay_missing")

        assert exc_info.value.payment_id == "pay_missing"
