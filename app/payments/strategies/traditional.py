"""
Traditional payment strategy for money taken at the front desk.

Cash, card and bank transfer payments are settled the moment they are
recorded, so the whole flow runs in one transaction:

    lock booking -> create Payment (PENDING) -> complete() -> save -> ledger-apply

The booking row is locked before the Payment insert. On PostgreSQL the
insert takes a key-share lock on the referenced booking, which would
otherwise deadlock against a concurrent payment waiting for FOR UPDATE.

If the ledger-apply fails, the Payment row is rolled back with it and no
trace of the attempt remains in the database.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from bookings.ledger.services import booking_ledger
from payments.exceptions import PersistenceFailure
from payments.models import Payment
from payments.strategies.base import PaymentRequest, PaymentResult, PaymentStrategy

logger = logging.getLogger(__name__)


class TraditionalPaymentStrategy(PaymentStrategy):
    """Immediate settlement for CASH / CARD / TRANSFER."""

    success_message = "Payment processed successfully"

    def process(self, request: PaymentRequest) -> PaymentResult:
        try:
            with transaction.atomic():
                booking_ledger.lock_booking(request.booking_id)
                payment = Payment.objects.create(
                    booking=request.booking,
                    amount=request.amount,
                    currency=request.currency,
                    payment_method=request.payment_method,
                    customer_email=request.customer_email,
                    description=request.description,
                )
                payment.complete()
                payment.save()

                booking_ledger.apply_payment(
                    request.booking_id,
                    payment.amount,
                    description=payment.description,
                    reference=str(payment.id),
                    paid_by=request.customer_email,
                )
        except DatabaseError as exc:
            raise PersistenceFailure(
                str(exc),
                details={"booking_id": str(request.booking_id), "amount": str(request.amount)},
            ) from exc

        logger.info(
            "Payment completed",
            extra={
                "payment_id": str(payment.id),
                "booking_id": str(request.booking_id),
                "amount": str(payment.amount),
                "payment_method": payment.payment_method,
            },
        )
        return PaymentResult.succeeded(payment, self.success_message)
