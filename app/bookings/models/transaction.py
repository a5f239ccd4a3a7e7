"""
Append-only room transaction ledger.

Each Transaction is one line against a room: a charge, a fee, a payment,
a deposit or a refund. Lines are never edited or deleted; corrections are
posted as new lines. A room's balance is recomputed by summing the lines
(credits negated) rather than trusted from the cached Room.balance.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin

from bookings.states import TransactionCategory, TransactionType


class ImmutableTransactionError(Exception):
    """Raised when code tries to update or delete a posted transaction."""


class Transaction(UUIDPrimaryKeyMixin, models.Model):
    """
    One posted line in a room's ledger.

    Fields:
        room: Room the line is posted against
        booking: Booking that produced the line, when there is one
        transaction_type: PAYMENT / CHARGE / REFUND / FEE / DEPOSIT
        transaction_category: RENT / UTILITIES / DAMAGES / DEPOSIT / LATE_FEE
        amount: Signed amount as posted (a reversed payment is negative)
        running_balance: Room balance right after this line was posted
        paid_by / collected_by: Who handed over / received the money
        reference_number: External reference (receipt, payment id)
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this line was posted",
    )
    room = models.ForeignKey(
        "bookings.Room",
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="transactions",
        null=True,
        blank=True,
    )
    transaction_type = models.CharField(
        max_length=10,
        choices=TransactionType.choices,
        db_index=True,
    )
    transaction_category = models.CharField(
        max_length=10,
        choices=TransactionCategory.choices,
        default=TransactionCategory.RENT,
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    running_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    description = models.CharField(max_length=255, blank=True, default="")
    paid_by = models.CharField(max_length=100, blank=True, default="")
    collected_by = models.CharField(max_length=100, blank=True, default="")
    reference_number = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["room", "created_at"], name="txn_room_created_idx"),
            models.Index(fields=["booking", "created_at"], name="txn_booking_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_transaction_type_display()} {self.amount} (room={self.room_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableTransactionError(
                f"Transaction {self.pk} is append-only and cannot be modified"
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableTransactionError(
            f"Transaction {self.pk} is append-only and cannot be deleted"
        )

    @property
    def is_credit(self) -> bool:
        return self.transaction_type in TransactionType.credit_types()

    @property
    def is_debit(self) -> bool:
        return self.transaction_type in TransactionType.debit_types()

    @property
    def balance_effect(self) -> Decimal:
        """Signed effect on the room balance: credits subtract, debits add."""
        return -self.amount if self.is_credit else self.amount
