"""
Tests for payment reconciliation.
"""

import pytest

from shopcalendar.domain.exceptions import TransactionDataError
from shopcalendar.domain.models import PaymentTransaction, TransactionType
from shopcalendar.domain.payments import (
    PaymentStatus,
    calculate,
    calculate_from_records,
    paid_percentage,
)


def _payment(amount, refunded=0, type=TransactionType.PAYMENT, id="p"):
    return PaymentTransaction(
        id=id,
        amount_cents=amount,
        refunded_amount_cents=refunded,
        status="completed",
        type=type,
    )


class TestCalculate:
    """Tests for calculate."""

    def test_fully_paid(self):
        summary = calculate(10000, [_payment(10000)])

        assert summary.total_paid == 10000
        assert summary.total_refunded == 0
        assert summary.net_paid == 10000
        assert summary.amount_due == 0
        assert summary.percentage == 100
        assert summary.status is PaymentStatus.PAID

    def test_refund_rows_are_not_double_counted(self):
        """Test the refund row is already reflected in its parent payment."""
        summary = calculate(
            10000,
            [
                _payment(10000, refunded=5000, id="e49d6f98"),
                _payment(-5000, type=TransactionType.REFUND, id="16f4e8fd"),
            ],
        )

        assert summary.total_paid == 10000
        assert summary.total_refunded == 5000
        assert summary.net_paid == 5000
        assert summary.amount_due == 5000
        assert summary.percentage == 50
        assert summary.status is PaymentStatus.PARTIAL

    def test_plain_string_types_are_recognized(self):
        """Test that rows built with "payment"/"refund" strings behave like enum-typed rows."""
        summary = calculate(
            10000,
            [
                PaymentTransaction(id="p", amount_cents=10000, refunded_amount_cents=5000, type="payment"),
                PaymentTransaction(id="r", amount_cents=-5000, type="refund"),
            ],
        )

        assert summary.total_paid == 10000
        assert summary.net_paid == 5000
        assert summary.percentage == 50
        assert summary.status is PaymentStatus.PARTIAL

    def test_fully_refunded_is_unpaid(self):
        summary = calculate(10000, [_payment(10000, refunded=10000)])

        assert summary.net_paid == 0
        assert summary.amount_due == 10000
        assert summary.percentage == 0
        assert summary.status is PaymentStatus.UNPAID

    def test_overpaid(self):
        summary = calculate(10000, [_payment(15000)])

        assert summary.amount_due == -5000
        assert summary.has_credit
        assert summary.percentage == 150
        assert summary.status is PaymentStatus.OVERPAID

    def test_untyped_rows_are_payments(self):
        summary = calculate(10000, [_payment(10000, refunded=2500, type=None)])

        assert summary.net_paid == 7500
        assert summary.percentage == 75
        assert summary.status is PaymentStatus.PARTIAL

    def test_no_transactions(self):
        summary = calculate(4200, [])

        assert summary.net_paid == 0
        assert summary.amount_due == 4200
        assert summary.status is PaymentStatus.UNPAID

    def test_zero_total_does_not_divide(self):
        summary = calculate(0, [_payment(500)])

        assert summary.percentage == 0
        assert summary.status is PaymentStatus.OVERPAID

    def test_multiple_payments(self):
        summary = calculate(
            9000,
            [_payment(3000, id="a"), _payment(3000, refunded=1000, id="b"), _payment(1000, id="c")],
        )

        assert summary.total_paid == 7000
        assert summary.total_refunded == 1000
        assert summary.net_paid == 6000
        assert summary.percentage == 67


class TestPercentage:
    """Tests for paid_percentage rounding."""

    @pytest.mark.parametrize(
        "net,total,expected",
        [(1, 200, 1), (1, 300, 0), (2, 300, 1), (5, 1000, 1), (333, 1000, 33), (1, 8, 13)],
    )
    def test_rounds_half_up(self, net, total, expected):
        assert paid_percentage(net, total) == expected

    def test_negative_net_rounds_toward_positive_infinity_on_half(self):
        assert paid_percentage(-1, 200) == 0


class TestCalculateFromRecords:
    """Tests for calculate_from_records."""

    def test_persisted_rows(self):
        summary = calculate_from_records(
            10000,
            [
                {"id": "1", "amount_cents": 10000, "refunded_amount_cents": 5000, "status": "partially_refunded", "type": "payment"},
                {"id": "2", "amount_cents": -5000, "status": "succeeded", "type": "refund"},
            ],
        )

        assert summary.percentage == 50
        assert summary.status is PaymentStatus.PARTIAL

    def test_missing_amount_raises(self):
        with pytest.raises(TransactionDataError):
            calculate_from_records(10000, [{"id": "1", "status": "completed"}])
