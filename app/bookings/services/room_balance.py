"""
Room balance aggregator and reconciliation.

Recomputes balances straight from the append-only Transaction history
and compares them with the cached figures the write paths maintain
(Room.balance and Booking.current_balance). A mismatch means one of the
write paths has a bug; it is reported as a data-integrity alert and left
for a human to repair.

Usage:
    from bookings.services import RoomBalanceService

    balance = RoomBalanceService.get_room_balance(room.id)

    result = RoomBalanceService.reconcile_room(room.id)
    if result.success and not result.data.is_consistent:
        ...
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import models
from django.db.models import Case, F, Sum, Value, When
from django.db.models.functions import Coalesce

from core.services import BaseService, ServiceResult

from bookings.exceptions import RoomNotFound
from bookings.ledger.types import ZERO, to_money
from bookings.models import Booking, Room, Transaction
from bookings.states import TransactionType

_BALANCE_FIELD = models.DecimalField(max_digits=14, decimal_places=2)


@dataclass
class BalanceDiscrepancy:
    """One cached balance that disagrees with the transaction history."""

    scope: str  # "room" or "booking"
    object_id: str
    cached_balance: Decimal
    derived_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.cached_balance - self.derived_balance

    def to_dict(self) -> dict:
        return {
            "scope": self.scope,
            "object_id": self.object_id,
            "cached_balance": str(self.cached_balance),
            "derived_balance": str(self.derived_balance),
            "difference": str(self.difference),
        }


@dataclass
class RoomReconciliation:
    """Outcome of reconciling one room."""

    room_id: str
    derived_balance: Decimal
    cached_balance: Decimal
    bookings_checked: int = 0
    discrepancies: list[BalanceDiscrepancy] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.discrepancies

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "derived_balance": str(self.derived_balance),
            "cached_balance": str(self.cached_balance),
            "bookings_checked": self.bookings_checked,
            "is_consistent": self.is_consistent,
            "discrepancies": [d.to_dict() for d in self.discrepancies],
        }


class RoomBalanceService(BaseService):
    """Read-only balance derivation over the room transaction ledger."""

    @staticmethod
    def _signed_sum(queryset) -> Decimal:
        """Sum transaction amounts with credit types negated."""
        result = queryset.aggregate(
            balance=Coalesce(
                Sum(
                    Case(
                        When(
                            transaction_type__in=TransactionType.credit_types(),
                            then=-F("amount"),
                        ),
                        default=F("amount"),
                        output_field=_BALANCE_FIELD,
                    )
                ),
                Value(ZERO),
                output_field=_BALANCE_FIELD,
            )
        )
        return to_money(result["balance"])

    @classmethod
    def get_room_balance(cls, room_id: uuid.UUID) -> Decimal:
        """
        Derive a room's balance from its full transaction history.

        Returns:
            Charges and fees minus payments, deposits and refunds.
            Zero when the room has no transactions.
        """
        return cls._signed_sum(Transaction.objects.filter(room_id=room_id))

    @classmethod
    def get_booking_balance(cls, booking_id: uuid.UUID) -> Decimal:
        """Derive a booking's balance from the lines its ledger-apply posted."""
        return cls._signed_sum(Transaction.objects.filter(booking_id=booking_id))

    @classmethod
    def reconcile_room(cls, room_id: uuid.UUID) -> ServiceResult[RoomReconciliation]:
        """
        Compare cached balances for a room and its bookings with the history.

        Every divergence is logged at ERROR level. Nothing is modified.
        """
        room = Room.objects.filter(id=room_id).first()
        if room is None:
            return ServiceResult.from_exception(
                RoomNotFound(
                    f"Room {room_id} not found",
                    details={"room_id": str(room_id)},
                )
            )

        derived = cls.get_room_balance(room.id)
        report = RoomReconciliation(
            room_id=str(room.id),
            derived_balance=derived,
            cached_balance=to_money(room.balance),
        )
        if report.cached_balance != derived:
            report.discrepancies.append(
                BalanceDiscrepancy(
                    scope="room",
                    object_id=str(room.id),
                    cached_balance=report.cached_balance,
                    derived_balance=derived,
                )
            )

        for booking in Booking.objects.filter(room=room).only("id", "current_balance"):
            report.bookings_checked += 1
            booking_derived = cls.get_booking_balance(booking.id)
            cached = to_money(booking.current_balance)
            if cached != booking_derived:
                report.discrepancies.append(
                    BalanceDiscrepancy(
                        scope="booking",
                        object_id=str(booking.id),
                        cached_balance=cached,
                        derived_balance=booking_derived,
                    )
                )

        logger = cls.get_logger()
        for discrepancy in report.discrepancies:
            logger.error(
                "Data integrity alert: cached balance diverges from transaction history",
                extra={"room_id": report.room_id, **discrepancy.to_dict()},
            )

        return ServiceResult.success(report)
