"""
Booking model: one guest's occupancy of one room, plus its ledger totals.

The financial fields are only ever changed through add_charge() and
add_payment(). Both accumulate into the running totals and then call
recalculate(), which applies the pure rules in bookings.ledger.rules.
Persisting the result (under a row lock) is the job of
bookings.ledger.services.BookingLedgerService.

Usage:
    booking = Booking.objects.create(room=room, guest=guest, check_in_date=today)
    booking.add_charge(Decimal("200.00"))
    booking.add_payment(Decimal("50.00"))
    booking.current_balance   # Decimal("150.00")
    booking.payment_status    # "PARTIAL"
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db import models
from django.utils import timezone

from core.model_mixins import ActiveFlagMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel

from bookings.exceptions import InvalidAmount
from bookings.ledger.rules import (
    compute_balance,
    derive_payment_status,
    resolve_payment_status,
)
from bookings.ledger.types import ZERO, require_positive, to_money
from bookings.states import BookingPaymentStatus, BookingStatus, PaymentFrequency


class Booking(UUIDPrimaryKeyMixin, ActiveFlagMixin, BaseModel):
    """
    A guest's stay in a room and what they owe for it.

    Fields:
        room: The occupied room
        guest: The guest who owes the balance
        nightly_rate: Agreed rate per night
        payment_frequency: Billing cadence
        total_charges: Sum of all charges (never negative)
        total_payments: Sum of all settled payments net of refunds
        current_balance: total_charges - total_payments
        booking_status: ACTIVE / COMPLETED / CANCELLED
        payment_status: PENDING / PARTIAL / PAID / OVERDUE
        check_in_date / check_out_date / expected_check_out_date: Stay dates

    Constraints:
        - total_charges >= 0
        - nightly_rate >= 0
    """

    room = models.ForeignKey(
        "bookings.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        "bookings.Guest",
        on_delete=models.PROTECT,
        related_name="bookings",
    )

    # Financial state
    nightly_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    payment_frequency = models.CharField(
        max_length=10,
        choices=PaymentFrequency.choices,
        default=PaymentFrequency.DAILY,
    )
    total_charges = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    total_payments = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    current_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    # Status
    booking_status = models.CharField(
        max_length=10,
        choices=BookingStatus.choices,
        default=BookingStatus.ACTIVE,
        db_index=True,
    )
    payment_status = models.CharField(
        max_length=10,
        choices=BookingPaymentStatus.choices,
        default=BookingPaymentStatus.PENDING,
        db_index=True,
    )

    # Stay dates
    check_in_date = models.DateField()
    check_out_date = models.DateField(null=True, blank=True)
    expected_check_out_date = models.DateField(null=True, blank=True)

    special_instructions = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-check_in_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_charges__gte=0),
                name="booking_total_charges_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(nightly_rate__gte=0),
                name="booking_nightly_rate_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "booking_status"], name="booking_room_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking({self.id}, room={self.room_id}, {self.payment_status})"

    # ==========================================================================
    # Ledger mutations
    # ==========================================================================

    def add_charge(self, amount) -> Decimal:
        """
        Add a charge to the booking.

        Args:
            amount: Positive monetary amount

        Returns:
            The new current balance

        Raises:
            InvalidAmount: If amount is not a positive money value
        """
        charge = require_positive(amount, label="Charge amount")
        self.total_charges = to_money(self.total_charges) + charge
        return self.recalculate()

    def add_payment(self, amount) -> Decimal:
        """
        Add a payment (positive) or a refund (negative) to the booking.

        Returns:
            The new current balance

        Raises:
            InvalidAmount: If amount is zero or not a money value
        """
        payment = to_money(amount)
        if payment == ZERO:
            raise InvalidAmount(
                "Payment amount cannot be zero",
                details={"amount": str(payment)},
            )
        self.total_payments = to_money(self.total_payments) + payment
        return self.recalculate()

    def recalculate(self) -> Decimal:
        """Recompute balance and payment status from the two totals."""
        self.current_balance = compute_balance(self.total_charges, self.total_payments)
        derived = derive_payment_status(self.total_payments, self.current_balance)
        self.payment_status = resolve_payment_status(self.payment_status, derived)
        return self.current_balance

    # ==========================================================================
    # Derived values
    # ==========================================================================

    @property
    def display_balance(self) -> Decimal:
        """Balance as shown to guests: never below zero."""
        return max(to_money(self.current_balance), ZERO)

    @property
    def number_of_nights(self) -> int:
        return self.calculate_nights()

    def calculate_nights(self, today: date | None = None) -> int:
        """
        Count nights between check-in and check-out.

        While the guest is still in the room, nights are counted up to
        today.
        """
        end = self.check_out_date or today or timezone.localdate()
        return max((end - self.check_in_date).days, 0)

    @property
    def is_overdue(self) -> bool:
        return self.payment_status == BookingPaymentStatus.OVERDUE

    @property
    def is_currently_active(self) -> bool:
        return (
            self.is_active
            and self.booking_status == BookingStatus.ACTIVE
            and self.check_out_date is None
        )
