"""
Pure balance and payment-status rules for a booking.

Nothing in here touches the database. The Booking model calls these after
every charge or payment so the rules can be unit-tested on plain values.
"""

from __future__ import annotations

from decimal import Decimal

from bookings.ledger.types import ZERO, to_money
from bookings.states import BookingPaymentStatus


def compute_balance(total_charges: Decimal, total_payments: Decimal) -> Decimal:
    """Return the raw balance (may be negative when overpaid)."""
    return to_money(total_charges) - to_money(total_payments)


def derive_payment_status(total_payments: Decimal, current_balance: Decimal) -> str:
    """
    Derive the payment status from the booking totals.

    Rules:
        balance <= 0                  -> PAID
        balance > 0 and payments > 0  -> PARTIAL
        balance > 0 and payments == 0 -> PENDING

    A negative payment total (only reachable through refunds recorded
    elsewhere) counts as "nothing paid".
    """
    if to_money(current_balance) <= ZERO:
        return BookingPaymentStatus.PAID
    if to_money(total_payments) > ZERO:
        return BookingPaymentStatus.PARTIAL
    return BookingPaymentStatus.PENDING


def resolve_payment_status(previous: str | None, derived: str) -> str:
    """
    Merge a freshly derived status with the stored one.

    OVERDUE is set outside the ledger. A ledger mutation only replaces it
    when the booking has been paid off.
    """
    if previous == BookingPaymentStatus.OVERDUE and derived != BookingPaymentStatus.PAID:
        return BookingPaymentStatus.OVERDUE
    return derived
