"""
Payment reconciliation: net an order's payments and refunds into one balance.

Refund-typed rows are adjustments that are already folded into their parent
payment's ``refunded_amount_cents``. Summing them again would subtract the
same refund twice, so they are excluded before any totals are taken.
"""

import math
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Any, Iterable, List, Mapping

from .models import PaymentTransaction, transactions_from_records


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERPAID = "overpaid"


@dataclass(frozen=True)
class PaymentSummary:
    """Derived balance of an order; never persisted."""
    total_paid: int
    total_refunded: int
    net_paid: int
    amount_due: int
    percentage: int
    status: PaymentStatus

    @property
    def has_credit(self) -> bool:
        """A negative amount due means the shop owes the client."""
        return self.amount_due < 0


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def paid_percentage(net_paid: int, order_total_cents: int) -> int:
    """Rounded share of the order covered; 0 for a zero-total order."""
    if order_total_cents == 0:
        return 0
    return _round_half_up(Fraction(net_paid * 100, order_total_cents))


def payment_status(net_paid: int, order_total_cents: int) -> PaymentStatus:
    if net_paid <= 0:
        return PaymentStatus.UNPAID
    if net_paid == order_total_cents:
        return PaymentStatus.PAID
    if net_paid > order_total_cents:
        return PaymentStatus.OVERPAID
    return PaymentStatus.PARTIAL


def calculate(order_total_cents: int, transactions: Iterable[PaymentTransaction]) -> PaymentSummary:
    """
    Calculate the payment summary for an order.

    Transactions without a type are treated as payments.

    Args:
        order_total_cents: Active order total
        transactions: Payment history of the order's invoice

    Returns:
        PaymentSummary with totals, amount due, percentage and status
    """
    payments: List[PaymentTransaction] = [tx for tx in transactions if not tx.is_refund]

    total_paid = sum(tx.amount_cents for tx in payments)
    total_refunded = sum(tx.refunded_amount_cents for tx in payments)
    net_paid = total_paid - total_refunded

    return PaymentSummary(
        total_paid=total_paid,
        total_refunded=total_refunded,
        net_paid=net_paid,
        amount_due=order_total_cents - net_paid,
        percentage=paid_percentage(net_paid, order_total_cents),
        status=payment_status(net_paid, order_total_cents),
    )


def calculate_from_records(order_total_cents: int, records: Iterable[Mapping[str, Any]]) -> PaymentSummary:
    """
    Calculate from raw payment rows.

    Raises:
        TransactionDataError: If a row is structurally malformed
    """
    return calculate(order_total_cents, transactions_from_records(records))
