"""
Booking ledger: totals, balance and payment status of a single booking.

Invariant, after every mutation:

    current_balance == total_charges - total_payments

and payment_status is derived from (total_payments, current_balance) by
derive_payment_status(), except that an OVERDUE booking stays OVERDUE
until its balance is cleared.

Module Layout:
    types: Money coercion (to_money, require_positive, ZERO)
    rules: Pure balance/status functions
    services: BookingLedgerService, the locked persist path

Usage:
    from bookings.ledger import derive_payment_status, to_money
    from bookings.ledger.services import booking_ledger

    # Pure rules
    derive_payment_status(to_money("50"), to_money("150"))  # "PARTIAL"

    # Locked, persisted ledger-apply
    booking = booking_ledger.apply_payment(booking_id, to_money("50.00"))

Note:
    services is NOT imported here. It depends on the Booking model, which
    itself imports the rules from this package.
"""

from bookings.ledger.rules import (
    compute_balance,
    derive_payment_status,
    resolve_payment_status,
)
from bookings.ledger.types import ZERO, require_positive, to_money

__all__ = [
    "ZERO",
    "compute_balance",
    "derive_payment_status",
    "require_positive",
    "resolve_payment_status",
    "to_money",
]
