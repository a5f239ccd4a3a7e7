"""
Booking ledger service: the locked, persisted ledger-apply step.

Every change to a booking's totals goes through this service. Each call:

1. Opens (or joins) a database transaction
2. Re-reads the booking with SELECT ... FOR UPDATE, so concurrent
   payments against the same booking are serialized on that row only
3. Mutates the fresh row with Booking.add_charge / add_payment
4. Saves the booking and appends the matching room Transaction line

Callers that must commit other rows together with the booking (for
example a Payment's terminal status) wrap the call in their own
transaction.atomic() block; the nested block becomes a savepoint and the
row lock is held until the outer transaction commits.

Usage:
    from bookings.ledger.services import booking_ledger

    with transaction.atomic():
        payment.save()
        booking_ledger.apply_payment(payment.booking_id, payment.amount, reference=str(payment.id))
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from bookings.exceptions import BookingNotFound
from bookings.ledger.types import to_money
from bookings.models import Booking, Room
from bookings.services.transaction_service import TransactionService
from bookings.states import TransactionCategory, TransactionType

logger = logging.getLogger(__name__)


class BookingLedgerService:
    """
    Service class for booking ledger writes.

    All methods are static - no instance state is maintained.
    """

    @staticmethod
    def get_booking(booking_id: uuid.UUID) -> Booking:
        """
        Get a booking by ID without locking.

        Raises:
            BookingNotFound: If booking doesn't exist
        """
        try:
            return Booking.objects.select_related("room", "guest").get(id=booking_id)
        except (Booking.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise BookingNotFound(
                f"Booking {booking_id} not found",
                details={"booking_id": str(booking_id)},
            ) from exc

    @staticmethod
    def lock_booking(booking_id: uuid.UUID) -> Booking:
        """
        Re-read a booking under a row lock.

        Must be called inside transaction.atomic().

        Raises:
            BookingNotFound: If booking doesn't exist
        """
        try:
            return Booking.objects.select_for_update().get(id=booking_id)
        except (Booking.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise BookingNotFound(
                f"Booking {booking_id} not found",
                details={"booking_id": str(booking_id)},
            ) from exc

    @staticmethod
    def apply_charge(
        booking_id: uuid.UUID,
        amount: Decimal,
        description: str = "",
        category: str = TransactionCategory.RENT,
        reference: str = "",
    ) -> Booking:
        """
        Add a charge to a booking and post it to the room ledger.

        Args:
            booking_id: Booking to charge
            amount: Positive charge amount
            description: Text for the room transaction line
            category: Room transaction category
            reference: External reference for the room transaction line

        Returns:
            The updated, saved Booking

        Raises:
            BookingNotFound: If booking doesn't exist
            InvalidAmount: If amount is not positive
        """
        with transaction.atomic():
            booking = BookingLedgerService.lock_booking(booking_id)
            booking.add_charge(amount)
            booking.save(
                update_fields=[
                    "total_charges",
                    "current_balance",
                    "payment_status",
                    "updated_at",
                ]
            )
            BookingLedgerService._post_room_line(
                booking,
                TransactionType.CHARGE,
                to_money(amount),
                description=description,
                category=category,
                reference_number=reference,
            )

        logger.info(
            "Booking charge applied",
            extra={
                "booking_id": str(booking.id),
                "amount": str(amount),
                "current_balance": str(booking.current_balance),
                "payment_status": booking.payment_status,
            },
        )
        return booking

    @staticmethod
    def apply_payment(
        booking_id: uuid.UUID,
        amount: Decimal,
        description: str = "",
        reference: str = "",
        paid_by: str = "",
    ) -> Booking:
        """
        Add a settled payment (or a negative refund) to a booking.

        Args:
            booking_id: Booking being paid
            amount: Signed amount; negative for refunds
            description: Text for the room transaction line
            reference: External reference (usually the Payment id)
            paid_by: Who paid, for the room transaction line

        Returns:
            The updated, saved Booking

        Raises:
            BookingNotFound: If booking doesn't exist
            InvalidAmount: If amount is zero or malformed
        """
        with transaction.atomic():
            booking = BookingLedgerService.lock_booking(booking_id)
            booking.add_payment(amount)
            booking.save(
                update_fields=[
                    "total_payments",
                    "current_balance",
                    "payment_status",
                    "updated_at",
                ]
            )
            BookingLedgerService._post_room_line(
                booking,
                TransactionType.PAYMENT,
                to_money(amount),
                description=description,
                reference_number=reference,
                paid_by=paid_by,
            )

        logger.info(
            "Booking payment applied",
            extra={
                "booking_id": str(booking.id),
                "amount": str(amount),
                "total_payments": str(booking.total_payments),
                "current_balance": str(booking.current_balance),
                "payment_status": booking.payment_status,
            },
        )
        return booking

    @staticmethod
    def _post_room_line(
        booking: Booking,
        transaction_type: str,
        amount: Decimal,
        **kwargs,
    ):
        """
        Append the room ledger line mirroring a booking mutation.

        Runs inside the caller's transaction. The room row is locked after
        the booking row, the same order every ledger-apply uses.
        """
        room = Room.objects.select_for_update().get(id=booking.room_id)
        return TransactionService.append_line(
            room, transaction_type, amount, booking=booking, **kwargs
        )


# Singleton instance for convenient access
booking_ledger = BookingLedgerService()
