"""
Room and Guest models.

A Room is the unit that gets booked and that room transactions are
posted against. Its `balance` is a cached running total maintained by
TransactionService; the authoritative figure is always recomputed from
the transaction history by RoomBalanceService.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import ActiveFlagMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class Room(UUIDPrimaryKeyMixin, ActiveFlagMixin, BaseModel):
    """
    A rentable room.

    Fields:
        room_number: Unique human-facing identifier (e.g. "101")
        room_name: Optional display name
        room_type: Free-form category (single, double, suite...)
        base_rate: Default nightly rate for new bookings
        is_vacant: Whether the room is currently unoccupied
        balance: Cached running balance of the room transaction ledger
    """

    room_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Unique room number",
    )
    room_name = models.CharField(max_length=100, blank=True, default="")
    room_type = models.CharField(max_length=50, blank=True, default="")
    base_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Default nightly rate",
    )
    is_vacant = models.BooleanField(default=True)
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Cached running balance, maintained by TransactionService",
    )

    class Meta:
        ordering = ["room_number"]

    def __str__(self) -> str:
        if self.room_name:
            return f"Room {self.room_number} ({self.room_name})"
        return f"Room {self.room_number}"


class Guest(UUIDPrimaryKeyMixin, ActiveFlagMixin, BaseModel):
    """A person who stays in a room and owes the booking balance."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True, default="")
    phone_number = models.CharField(max_length=30, blank=True, default="")

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
