"""
Payment router: entry point for taking payments against bookings.

The router validates the request, resolves the booking and hands the
payment to the strategy registered for its payment method. It is the
error boundary for payment processing: every outcome, including
unexpected exceptions, comes back as a PaymentResult. Database failures
carry PERSISTENCE_FAILURE; exceptions that are not application errors
are reported as UNEXPECTED_ERROR.

Strategy Registry:
    - CASH / CARD / TRANSFER: TraditionalPaymentStrategy
    - UPP_DEVICE: DevicePaymentStrategy
    - anything else registered via register_strategy()
    - unregistered methods fall back to TraditionalPaymentStrategy

Usage:
    from payments.services import PaymentRouter

    result = PaymentRouter.process_payment(
        booking_id=booking.id,
        amount=Decimal("50.00"),
        payment_method=PaymentMethod.CASH,
    )
    if result:
        print(result.payment.status)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Count, Sum

from bookings.exceptions import BookingNotFound, InvalidAmount
from bookings.ledger.services import booking_ledger
from bookings.ledger.types import ZERO, require_positive
from core.exceptions import BaseApplicationError, ValidationError
from core.services import BaseService, ServiceResult
from payments.adapters.base import DeviceGateway, DeviceRegistration
from payments.adapters.registry import get_gateway
from payments.exceptions import UNEXPECTED_ERROR_CODE
from payments.models import Payment
from payments.state_machines import PaymentMethod, PaymentStatus
from payments.strategies import (
    DevicePaymentStrategy,
    PaymentRequest,
    PaymentResult,
    PaymentStrategy,
    TraditionalPaymentStrategy,
)

logger = logging.getLogger(__name__)


@dataclass
class PaymentStatistics:
    """
    Aggregate view over all active payments.

    Attributes:
        total_payments: Number of active payments (refunds included)
        by_status: Count per PaymentStatus value
        by_method: Count per PaymentMethod value
        total_upp_amount: Sum of COMPLETED UPP_DEVICE payment amounts
        recent_payments: Most recent active payments, newest first
    """

    total_payments: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_method: dict[str, int] = field(default_factory=dict)
    total_upp_amount: Decimal = ZERO
    recent_payments: list[Payment] = field(default_factory=list)

    @property
    def completed_payments(self) -> int:
        return self.by_status.get(PaymentStatus.COMPLETED, 0)

    @property
    def pending_payments(self) -> int:
        return self.by_status.get(PaymentStatus.PENDING, 0)

    @property
    def failed_payments(self) -> int:
        return self.by_status.get(PaymentStatus.FAILED, 0)

    @property
    def upp_payments(self) -> int:
        return self.by_method.get(PaymentMethod.UPP_DEVICE, 0)

    @property
    def traditional_payments(self) -> int:
        return self.total_payments - self.upp_payments

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_payments": self.total_payments,
            "completed_payments": self.completed_payments,
            "pending_payments": self.pending_payments,
            "failed_payments": self.failed_payments,
            "upp_payments": self.upp_payments,
            "traditional_payments": self.traditional_payments,
            "by_status": dict(self.by_status),
            "by_method": dict(self.by_method),
            "total_upp_amount": str(self.total_upp_amount),
            "recent_payment_ids": [str(p.id) for p in self.recent_payments],
        }


class PaymentRouter(BaseService):
    """
    Routes payments to strategies and reports on them.

    All methods are class methods - no instance state is maintained.
    """

    STRATEGIES: dict[str, type[PaymentStrategy]] = {
        PaymentMethod.CASH: TraditionalPaymentStrategy,
        PaymentMethod.CARD: TraditionalPaymentStrategy,
        PaymentMethod.TRANSFER: TraditionalPaymentStrategy,
        PaymentMethod.UPP_DEVICE: DevicePaymentStrategy,
    }
    DEFAULT_STRATEGY: type[PaymentStrategy] = TraditionalPaymentStrategy

    @classmethod
    def register_strategy(cls, payment_method: str, strategy_class: type[PaymentStrategy]) -> None:
        """Register (or replace) the strategy for a payment method."""
        cls.STRATEGIES[payment_method] = strategy_class

    @classmethod
    def get_strategy(cls, payment_method: str) -> PaymentStrategy:
        """Get a strategy instance for a payment method."""
        strategy_class = cls.STRATEGIES.get(payment_method, cls.DEFAULT_STRATEGY)
        return strategy_class()

    # =========================================================================
    # Payment Processing
    # =========================================================================

    @classmethod
    def process_payment(
        cls,
        booking_id: uuid.UUID,
        amount: Decimal | int | str,
        payment_method: str,
        device_type: str | None = None,
        device_id: str | None = None,
        customer_email: str = "",
    ) -> PaymentResult:
        """
        Take a payment against a booking.

        Args:
            booking_id: Booking being paid
            amount: Positive amount; Decimal, int or numeric string
            payment_method: PaymentMethod value (or a registered method)
            device_type: Device type for UPP_DEVICE payments
            device_id: Device id for UPP_DEVICE payments
            customer_email: Payer's email

        Returns:
            PaymentResult; never raises
        """
        log = cls.get_logger()
        log_context = {
            "booking_id": str(booking_id),
            "amount": str(amount),
            "payment_method": payment_method,
            "device_type": device_type,
        }

        try:
            money = require_positive(amount)
            cls._validate_method(payment_method)
            booking = booking_ledger.get_booking(booking_id)
        except InvalidAmount as e:
            log.warning("Payment rejected", extra={**log_context, "error": e.message})
            return PaymentResult.failed(e.message, error_code=e.error_code)
        except (BookingNotFound, ValidationError) as e:
            log.warning("Payment rejected", extra={**log_context, "error": e.message})
            return PaymentResult.failed(
                f"Payment processing failed: {e.message}",
                error_code=e.error_code,
            )

        request = PaymentRequest(
            booking=booking,
            amount=money,
            payment_method=payment_method,
            device_type=device_type,
            device_id=device_id,
            customer_email=customer_email,
            currency=getattr(settings, "PAYMENT_DEFAULT_CURRENCY", "USD"),
            description=f"Payment for Room {booking.room.room_number} - {booking.guest.full_name}",
        )

        log.info("Processing payment", extra=log_context)
        try:
            return cls.get_strategy(payment_method).process(request)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            log.error(
                "Payment processing failed",
                extra={**log_context, "error_type": type(e).__name__, "error": message},
                exc_info=True,
            )
            payment = cls._fail_orphaned_payment(request, message)
            error_code = (
                e.error_code if isinstance(e, BaseApplicationError) else UNEXPECTED_ERROR_CODE
            )
            return PaymentResult.failed(
                f"Payment processing failed: {message}",
                payment=payment,
                error_code=error_code,
            )

    @classmethod
    def _validate_method(cls, payment_method: str) -> None:
        if payment_method in cls.STRATEGIES or payment_method in PaymentMethod.values:
            return
        raise ValidationError(
            f"Unsupported payment method: {payment_method}",
            error_code="INVALID_PAYMENT_METHOD",
            details={"payment_method": payment_method},
        )

    @classmethod
    def _fail_orphaned_payment(cls, request: PaymentRequest, message: str) -> Payment | None:
        """
        Mark a Payment that was committed before the failure as FAILED.

        Payments created inside the failed transaction were rolled back
        and are not found here.
        """
        if request.payment is None:
            return None
        try:
            with transaction.atomic():
                payment = (
                    Payment.objects.select_for_update()
                    .filter(pk=request.payment.pk)
                    .first()
                )
                if payment is None or not payment.is_pending:
                    return payment
                payment.fail()
                payment.update_meta({"error": message}, save=False)
                payment.save()
                return payment
        except DatabaseError:
            cls.get_logger().exception(
                "Could not mark payment as failed",
                extra={"payment_id": str(request.payment.pk)},
            )
            return request.payment

    # =========================================================================
    # Queries
    # =========================================================================

    @classmethod
    def get_payment_history(cls, booking_id: uuid.UUID) -> list[Payment]:
        """Active payments for a booking, newest first."""
        return list(
            Payment.objects.filter(booking_id=booking_id, is_active=True).order_by("-created_at")
        )

    @classmethod
    def get_payment_statistics(cls, recent_limit: int | None = None) -> PaymentStatistics:
        """Counts by status and method, completed UPP volume and recent payments."""
        if recent_limit is None:
            recent_limit = getattr(settings, "PAYMENT_RECENT_LIMIT", 10)

        active = Payment.objects.filter(is_active=True)
        by_status = {
            row["status"]: row["count"]
            for row in active.values("status").annotate(count=Count("id")).order_by()
        }
        by_method = {
            row["payment_method"]: row["count"]
            for row in active.values("payment_method").annotate(count=Count("id")).order_by()
        }
        upp_total = active.filter(
            payment_method=PaymentMethod.UPP_DEVICE,
            status=PaymentStatus.COMPLETED,
        ).aggregate(total=Sum("amount"))["total"]

        return PaymentStatistics(
            total_payments=sum(by_status.values()),
            by_status=by_status,
            by_method=by_method,
            total_upp_amount=upp_total if upp_total is not None else ZERO,
            recent_payments=list(
                active.select_related("booking").order_by("-created_at")[:recent_limit]
            ),
        )

    # =========================================================================
    # Device gateway pass-throughs
    # =========================================================================

    @classmethod
    def device_gateway(cls) -> DeviceGateway:
        return get_gateway(PaymentMethod.UPP_DEVICE)

    @classmethod
    def is_device_gateway_configured(cls) -> bool:
        return cls.device_gateway().is_configured()

    @classmethod
    def is_device_service_healthy(cls) -> bool:
        return cls.device_gateway().is_service_healthy()

    @classmethod
    def get_device_capabilities(cls, device_type: str) -> dict[str, Any]:
        return cls.device_gateway().get_device_capabilities(device_type)

    @classmethod
    def get_supported_currencies(cls) -> dict[str, Any]:
        return cls.device_gateway().get_supported_currencies()

    @classmethod
    def register_device(
        cls,
        device_type: str,
        device_id: str,
        capabilities: dict[str, Any] | None = None,
    ) -> ServiceResult[DeviceRegistration]:
        """
        Register a payment device with the gateway.

        Returns:
            ServiceResult with the DeviceRegistration, or the gateway
            error on failure
        """
        try:
            registration = cls.device_gateway().register_device(
                device_type, device_id, capabilities or {}
            )
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Device registration failed", logging.WARNING)
        return ServiceResult.success(registration)
