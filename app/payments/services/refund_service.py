"""
Refund service for returning money on completed payments.

A refund is its own Payment row with a negative amount, linked to the
original through refunded_payment. The original row is never modified.
The refund row, its COMPLETED status and the booking totals commit in
one transaction under the booking row lock.

Validation order:
    1. refund amount is positive                 -> InvalidAmount
    2. original payment exists                   -> PaymentNotFoundError
    3. original is not itself a refund           -> RefundOfRefundError
    4. original is COMPLETED                     -> OriginalNotCompleted
    5. amount <= original, then <= what remains  -> RefundExceedsOriginal

Usage:
    from payments.services import RefundService

    result = RefundService.refund_payment(payment.id, Decimal("25.00"))
    if result:
        refund = result.payment  # amount == Decimal("-25.00")
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.utils import timezone

from bookings.ledger.services import booking_ledger
from bookings.ledger.types import ZERO, require_positive
from core.exceptions import BaseApplicationError
from core.services import BaseService
from payments.exceptions import (
    UNEXPECTED_ERROR_CODE,
    OriginalNotCompleted,
    PaymentNotFoundError,
    PersistenceFailure,
    RefundExceedsOriginal,
    RefundOfRefundError,
)
from payments.models import Payment
from payments.state_machines import PaymentStatus
from payments.strategies import PaymentResult

REFUND_REFERENCE_SUFFIX = "_refund"


class RefundService(BaseService):
    """
    Service for refunding completed payments.

    All methods are class methods - no instance state is maintained.
    """

    success_message = "Refund processed successfully"

    @classmethod
    def refund_payment(
        cls,
        payment_id: uuid.UUID,
        refund_amount: Decimal | int | str,
    ) -> PaymentResult:
        """
        Refund all or part of a completed payment.

        Args:
            payment_id: Payment being refunded
            refund_amount: Positive amount to return to the guest

        Returns:
            PaymentResult with the refund Payment; never raises
        """
        log = cls.get_logger()
        log_context = {"payment_id": str(payment_id), "refund_amount": str(refund_amount)}

        try:
            amount = require_positive(refund_amount, label="Refund amount")
            original = cls._get_payment(payment_id)
            cls._check_refundable(original, amount)
            refund = cls._record_refund(original, amount)
        except PersistenceFailure as e:
            log.error(
                "Refund could not be recorded",
                extra={**log_context, "error": e.message},
                exc_info=True,
            )
            return PaymentResult.failed(f"Refund failed: {e.message}", error_code=e.error_code)
        except BaseApplicationError as e:
            log.warning("Refund rejected", extra={**log_context, "error": e.message, "details": e.details})
            return PaymentResult.failed(e.message, error_code=e.error_code)
        except Exception as e:
            log.error(
                "Refund processing error",
                extra={**log_context, "error_type": type(e).__name__, "error": str(e)},
                exc_info=True,
            )
            return PaymentResult.failed(f"Refund failed: {e}", error_code=UNEXPECTED_ERROR_CODE)

        log.info(
            "Refund completed",
            extra={
                **log_context,
                "refund_payment_id": str(refund.id),
                "booking_id": str(original.booking_id),
            },
        )
        return PaymentResult.succeeded(refund, cls.success_message)

    @classmethod
    def get_refunded_total(cls, original: Payment) -> Decimal:
        """Positive total already refunded against a payment."""
        total = Payment.objects.filter(
            refunded_payment=original,
            status=PaymentStatus.COMPLETED,
        ).aggregate(total=Sum("amount"))["total"]
        return -total if total is not None else ZERO

    # =========================================================================
    # Helpers
    # =========================================================================

    @classmethod
    def _record_refund(cls, original: Payment, amount: Decimal) -> Payment:
        """
        Create the refund and apply it to the booking in one transaction.

        The booking lock serializes refunds of the same original with each
        other and with payments on the booking.
        """
        try:
            with transaction.atomic():
                booking_ledger.lock_booking(original.booking_id)
                cls._check_remaining(original, amount)
                refund = cls._create_refund(original, amount)
                booking_ledger.apply_payment(
                    original.booking_id,
                    refund.amount,
                    description=refund.description,
                    reference=str(refund.id),
                    paid_by=refund.customer_email,
                )
        except DatabaseError as exc:
            raise PersistenceFailure(
                str(exc),
                details={"payment_id": str(original.id), "refund_amount": str(amount)},
            ) from exc
        return refund

    @staticmethod
    def _get_payment(payment_id: uuid.UUID) -> Payment:
        try:
            return Payment.objects.select_related("booking").get(id=payment_id)
        except (Payment.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise PaymentNotFoundError(
                "Payment not found",
                details={"payment_id": str(payment_id)},
            ) from exc

    @staticmethod
    def _check_refundable(original: Payment, amount: Decimal) -> None:
        if original.is_refund or original.refunded_payment_id is not None:
            raise RefundOfRefundError(
                "Cannot refund a refund",
                details={"payment_id": str(original.id)},
            )
        if not original.is_completed:
            raise OriginalNotCompleted(
                "Cannot refund incomplete payment",
                details={"payment_id": str(original.id), "status": original.status},
            )
        if amount > original.amount:
            raise RefundExceedsOriginal(
                "Refund amount cannot exceed original payment",
                details={
                    "refund_amount": str(amount),
                    "original_amount": str(original.amount),
                },
            )

    @classmethod
    def _check_remaining(cls, original: Payment, amount: Decimal) -> None:
        remaining = original.amount - cls.get_refunded_total(original)
        if amount > remaining:
            raise RefundExceedsOriginal(
                "Refund amount exceeds the remaining refundable amount",
                details={
                    "refund_amount": str(amount),
                    "remaining_refundable": str(remaining),
                },
            )

    @staticmethod
    def _create_refund(original: Payment, amount: Decimal) -> Payment:
        upp_transaction_id = ""
        if original.upp_transaction_id:
            upp_transaction_id = f"{original.upp_transaction_id}{REFUND_REFERENCE_SUFFIX}"

        refund = Payment.objects.create(
            booking_id=original.booking_id,
            amount=-amount,
            currency=original.currency,
            payment_method=original.payment_method,
            customer_email=original.customer_email,
            description=f"Refund for payment #{original.id}",
            device_type=original.device_type,
            device_id=original.device_id,
            upp_transaction_id=upp_transaction_id,
            refunded_payment=original,
        )
        refund.complete(processed_at=timezone.now())
        refund.save()
        return refund
