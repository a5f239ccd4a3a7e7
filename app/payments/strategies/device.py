"""
Device payment strategy for UPP-routed payments.

A device payment is only real once the external gateway confirms it, and
the gateway can take seconds to answer. The flow therefore spans three
steps, and no database lock is held while waiting on the network:

1. Persist the Payment as PENDING with its device fields
2. Call the gateway outside any transaction
3. In one transaction, lock the booking, re-lock the Payment and either
   - COMPLETE it, record the gateway ids and apply it to the booking, or
   - FAIL it and record why; the booking is not touched

State Flow:
    PENDING -> COMPLETED   (gateway success)
    PENDING -> FAILED      (gateway declined, timed out, raised or missing)
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from bookings.ledger.services import booking_ledger
from payments.adapters.base import DeviceGateway, GatewayPaymentResult
from payments.adapters.registry import get_gateway
from payments.exceptions import GatewayFailure, InvalidStateTransitionError, PersistenceFailure
from payments.models import Payment
from payments.state_machines import PaymentMethod
from payments.strategies.base import PaymentRequest, PaymentResult, PaymentStrategy

logger = logging.getLogger(__name__)


class DevicePaymentStrategy(PaymentStrategy):
    """
    Gateway-settled payments for UPP devices.

    Args:
        gateway: Gateway to settle through; looked up in the gateway
            registry by payment method when not given
    """

    success_message = "UPP payment processed successfully"

    def __init__(self, gateway: DeviceGateway | None = None):
        self._gateway = gateway

    def get_gateway(self, payment_method: str) -> DeviceGateway:
        if self._gateway is None:
            self._gateway = get_gateway(payment_method)
        return self._gateway

    def process(self, request: PaymentRequest) -> PaymentResult:
        device_type = request.device_type or settings.UPP_DEFAULT_DEVICE_TYPE
        device_id = request.device_id or settings.UPP_DEFAULT_DEVICE_ID
        payment_method = request.payment_method or PaymentMethod.UPP_DEVICE

        try:
            payment = Payment.objects.create(
                booking=request.booking,
                amount=request.amount,
                currency=request.currency,
                payment_method=payment_method,
                customer_email=request.customer_email,
                description=request.description,
                device_type=device_type,
                device_id=device_id,
            )
        except DatabaseError as exc:
            raise PersistenceFailure(
                str(exc),
                details={"booking_id": str(request.booking_id), "amount": str(request.amount)},
            ) from exc
        request.payment = payment

        try:
            gateway = self.get_gateway(payment_method)
            gateway_result = gateway.process_payment(payment, device_type, device_id)
            if not gateway_result.success:
                raise GatewayFailure(
                    gateway_result.error_message or "Payment processing failed",
                    details={"raw_response": gateway_result.raw_response},
                )
        except GatewayFailure as e:
            payment = self._mark_failed(
                payment,
                {
                    "upp_error": e.message,
                    "upp_device_type": device_type,
                    "upp_device_id": device_id,
                },
            )
            logger.warning(
                "Device payment declined",
                extra={"payment_id": str(payment.id), "error": e.message},
            )
            return PaymentResult.failed(
                f"UPP payment failed: {e.message}",
                payment=payment,
                error_code=e.error_code,
            )
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(
                "Device gateway raised",
                extra={
                    "payment_id": str(payment.id),
                    "device_type": device_type,
                    "error_type": type(e).__name__,
                    "error": message,
                },
                exc_info=True,
            )
            payment = self._mark_failed(payment, {"error": message})
            return PaymentResult.failed(
                f"UPP payment failed: {message}",
                payment=payment,
                error_code=getattr(e, "error_code", "GATEWAY_ERROR"),
            )

        payment = self._settle(payment, gateway_result, device_type, device_id)
        logger.info(
            "Device payment completed",
            extra={
                "payment_id": str(payment.id),
                "booking_id": str(request.booking_id),
                "amount": str(payment.amount),
                "upp_transaction_id": payment.upp_transaction_id,
            },
        )
        return PaymentResult.succeeded(payment, self.success_message)

    # =========================================================================
    # Terminal transitions
    # =========================================================================

    def _settle(
        self,
        payment: Payment,
        gateway_result: GatewayPaymentResult,
        device_type: str,
        device_id: str,
    ) -> Payment:
        processed_at = gateway_result.processed_at or timezone.now()

        try:
            with transaction.atomic():
                # Booking row first, as in every other payment write
                booking_ledger.lock_booking(payment.booking_id)
                locked = self._lock_pending(payment)
                locked.complete(processed_at=processed_at)
                locked.upp_transaction_id = gateway_result.transaction_id or ""
                locked.stripe_payment_intent_id = gateway_result.payment_intent_id or ""
                locked.update_meta(
                    {
                        "upp_transaction_id": gateway_result.transaction_id,
                        "upp_payment_intent_id": gateway_result.payment_intent_id,
                        "upp_device_type": device_type,
                        "upp_device_id": device_id,
                        "upp_risk_score": gateway_result.risk_score,
                        "upp_processed_at": processed_at.isoformat(),
                    },
                    save=False,
                )
                locked.save()

                booking_ledger.apply_payment(
                    locked.booking_id,
                    locked.amount,
                    description=locked.description,
                    reference=str(locked.id),
                    paid_by=locked.customer_email,
                )
        except DatabaseError as exc:
            raise PersistenceFailure(
                str(exc),
                details={
                    "payment_id": str(payment.id),
                    "upp_transaction_id": gateway_result.transaction_id,
                },
            ) from exc
        return locked

    def _mark_failed(self, payment: Payment, metadata: dict[str, Any]) -> Payment:
        with transaction.atomic():
            locked = self._lock_pending(payment)
            locked.fail()
            locked.update_meta(metadata, save=False)
            locked.save()
        return locked

    @staticmethod
    def _lock_pending(payment: Payment) -> Payment:
        locked = Payment.objects.select_for_update().get(pk=payment.pk)
        if not locked.is_pending:
            raise InvalidStateTransitionError(
                f"Payment {locked.id} is already {locked.status}",
                details={"payment_id": str(locked.id), "current_status": locked.status},
            )
        return locked
