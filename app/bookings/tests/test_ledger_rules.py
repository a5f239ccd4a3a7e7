"""
Tests for the pure booking balance and payment-status rules.
"""

from decimal import Decimal

import pytest

from bookings.ledger.rules import (
    compute_balance,
    derive_payment_status,
    resolve_payment_status,
)
from bookings.states import BookingPaymentStatus


class TestComputeBalance:
    def test_charges_minus_payments(self):
        assert compute_balance(Decimal("200.00"), Decimal("50.00")) == Decimal("150.00")

    def test_overpayment_is_negative(self):
        assert compute_balance(Decimal("100.00"), Decimal("120.00")) == Decimal("-20.00")


class TestDerivePaymentStatus:
    @pytest.mark.parametrize(
        "payments,balance,expected",
        [
            ("0.00", "0.00", BookingPaymentStatus.PAID),
            ("200.00", "0.00", BookingPaymentStatus.PAID),
            ("250.00", "-50.00", BookingPaymentStatus.PAID),
            ("50.00", "150.00", BookingPaymentStatus.PARTIAL),
            ("0.00", "200.00", BookingPaymentStatus.PENDING),
            ("-25.00", "225.00", BookingPaymentStatus.PENDING),
        ],
    )
    def test_status_from_totals(self, payments, balance, expected):
        assert derive_payment_status(Decimal(payments), Decimal(balance)) == expected


class TestResolvePaymentStatus:
    def test_derived_status_replaces_regular_status(self):
        result = resolve_payment_status(BookingPaymentStatus.PENDING, BookingPaymentStatus.PARTIAL)

        assert result == BookingPaymentStatus.PARTIAL

    def test_overdue_kept_while_balance_outstanding(self):
        result = resolve_payment_status(BookingPaymentStatus.OVERDUE, BookingPaymentStatus.PARTIAL)

        assert result == BookingPaymentStatus.OVERDUE

    def test_overdue_cleared_when_paid(self):
        result = resolve_payment_status(BookingPaymentStatus.OVERDUE, BookingPaymentStatus.PAID)

        assert result == BookingPaymentStatus.PAID

    def test_missing_previous_status_uses_derived(self):
        assert resolve_payment_status(None, BookingPaymentStatus.PENDING) == BookingPaymentStatus.PENDING
