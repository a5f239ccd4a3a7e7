"""
Status and category enums for the bookings domain.

All enums use Django's TextChoices for database storage, so values can be
used directly in model fields and queries.

Usage:
    from bookings.states import BookingPaymentStatus, TransactionType

    if booking.payment_status == BookingPaymentStatus.PAID:
        ...
"""

from django.db import models


class BookingStatus(models.TextChoices):
    """
    Occupancy status of a booking.

    ACTIVE is set at check-in. COMPLETED and CANCELLED are set by the
    check-out flow, which lives outside the ledger.
    """

    ACTIVE = "ACTIVE", "Active"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class BookingPaymentStatus(models.TextChoices):
    """
    Payment standing of a booking.

    PENDING, PARTIAL and PAID are derived from the booking totals on
    every ledger mutation. OVERDUE is only ever set by the time-based
    sweep and survives ledger mutations until the balance is cleared.
    """

    PENDING = "PENDING", "Pending"
    PARTIAL = "PARTIAL", "Partial"
    PAID = "PAID", "Paid"
    OVERDUE = "OVERDUE", "Overdue"


class PaymentFrequency(models.TextChoices):
    """How often the guest is billed."""

    DAILY = "DAILY", "Daily"
    WEEKLY = "WEEKLY", "Weekly"
    MONTHLY = "MONTHLY", "Monthly"


class TransactionType(models.TextChoices):
    """
    Kind of room ledger line.

    Credits (PAYMENT, DEPOSIT, REFUND) reduce what the room owes,
    debits (CHARGE, FEE) increase it.
    """

    PAYMENT = "PAYMENT", "Payment"
    CHARGE = "CHARGE", "Charge"
    REFUND = "REFUND", "Refund"
    FEE = "FEE", "Fee"
    DEPOSIT = "DEPOSIT", "Deposit"

    @classmethod
    def credit_types(cls) -> list[str]:
        return [cls.PAYMENT, cls.DEPOSIT, cls.REFUND]

    @classmethod
    def debit_types(cls) -> list[str]:
        return [cls.CHARGE, cls.FEE]


class TransactionCategory(models.TextChoices):
    """What a room ledger line is for."""

    RENT = "RENT", "Rent"
    UTILITIES = "UTILITIES", "Utilities"
    DAMAGES = "DAMAGES", "Damages"
    DEPOSIT = "DEPOSIT", "Deposit"
    LATE_FEE = "LATE_FEE", "Late Fee"
