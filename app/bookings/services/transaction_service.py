"""
Room transaction ledger service.

Posts append-only Transaction lines against a room and keeps the room's
cached running balance in step. Credits (payments, deposits, refunds)
lower the balance, debits (charges, fees) raise it.

Usage:
    from bookings.services import TransactionService

    TransactionService.add_charge(room.id, Decimal("200.00"), "Weekly rent")
    TransactionService.add_deposit(room.id, Decimal("100.00"), "Key deposit")
    lines = TransactionService.get_room_ledger(room.id)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from core.exceptions import ValidationError
from core.services import BaseService

from bookings.exceptions import RoomNotFound
from bookings.ledger.types import require_positive, to_money
from bookings.models import Room, Transaction
from bookings.states import TransactionCategory, TransactionType

if TYPE_CHECKING:
    from bookings.models import Booking


class TransactionService(BaseService):
    """Append-only writes and reads for the room transaction ledger."""

    @classmethod
    def add_transaction(
        cls,
        room_id: uuid.UUID,
        transaction_type: str,
        amount: Decimal,
        description: str = "",
        category: str = TransactionCategory.RENT,
        paid_by: str = "",
        collected_by: str = "",
        reference_number: str = "",
        notes: str = "",
    ) -> Transaction:
        """
        Post a new line against a room.

        Args:
            room_id: Room to post against
            transaction_type: One of TransactionType
            amount: Positive amount; the type decides its direction

        Returns:
            The created Transaction, with running_balance set

        Raises:
            RoomNotFound: If the room doesn't exist
            InvalidAmount: If amount is not positive
        """
        amount = require_positive(amount)
        if transaction_type not in TransactionType.values:
            raise ValidationError(
                f"Unknown transaction type: {transaction_type}",
                error_code="INVALID_TRANSACTION_TYPE",
            )

        with cls.atomic():
            room = cls._lock_room(room_id)
            line = cls.append_line(
                room,
                transaction_type,
                amount,
                description=description,
                category=category,
                paid_by=paid_by,
                collected_by=collected_by,
                reference_number=reference_number,
                notes=notes,
            )

        cls.get_logger().info(
            "Room transaction posted",
            extra={
                "room_id": str(room_id),
                "transaction_id": str(line.id),
                "transaction_type": transaction_type,
                "amount": str(amount),
                "running_balance": str(line.running_balance),
            },
        )
        return line

    @classmethod
    def append_line(
        cls,
        room: Room,
        transaction_type: str,
        amount: Decimal,
        booking: Booking | None = None,
        description: str = "",
        category: str = TransactionCategory.RENT,
        paid_by: str = "",
        collected_by: str = "",
        reference_number: str = "",
        notes: str = "",
    ) -> Transaction:
        """
        Append a line to an already locked room.

        The caller must hold the room row lock inside a transaction.
        Signed amounts are accepted here so a reversed booking payment
        can be mirrored as a negative PAYMENT line.
        """
        line = Transaction(
            room=room,
            booking=booking,
            transaction_type=transaction_type,
            transaction_category=category,
            amount=to_money(amount),
            description=description,
            paid_by=paid_by,
            collected_by=collected_by,
            reference_number=reference_number,
            notes=notes,
        )
        room.balance = to_money(room.balance) + line.balance_effect
        line.running_balance = room.balance
        line.save()
        room.save(update_fields=["balance", "updated_at"])
        return line

    @classmethod
    def add_payment(cls, room_id: uuid.UUID, amount: Decimal, description: str = "", **kwargs) -> Transaction:
        return cls.add_transaction(room_id, TransactionType.PAYMENT, amount, description, **kwargs)

    @classmethod
    def add_charge(cls, room_id: uuid.UUID, amount: Decimal, description: str = "", **kwargs) -> Transaction:
        return cls.add_transaction(room_id, TransactionType.CHARGE, amount, description, **kwargs)

    @classmethod
    def add_deposit(cls, room_id: uuid.UUID, amount: Decimal, description: str = "", **kwargs) -> Transaction:
        kwargs.setdefault("category", TransactionCategory.DEPOSIT)
        return cls.add_transaction(room_id, TransactionType.DEPOSIT, amount, description, **kwargs)

    @classmethod
    def add_fee(cls, room_id: uuid.UUID, amount: Decimal, description: str = "", **kwargs) -> Transaction:
        kwargs.setdefault("category", TransactionCategory.LATE_FEE)
        return cls.add_transaction(room_id, TransactionType.FEE, amount, description, **kwargs)

    @staticmethod
    def get_room_ledger(
        room_id: uuid.UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> QuerySet[Transaction]:
        """
        Get a room's ledger lines, newest first.

        Args:
            room_id: Room to list
            start: Optional inclusive lower bound on created_at
            end: Optional inclusive upper bound on created_at
        """
        queryset = Transaction.objects.filter(room_id=room_id)
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)
        return queryset.order_by("-created_at")

    @staticmethod
    def _lock_room(room_id: uuid.UUID) -> Room:
        try:
            return Room.objects.select_for_update().get(id=room_id)
        except (Room.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise RoomNotFound(
                f"Room {room_id} not found",
                details={"room_id": str(room_id)},
            ) from exc
