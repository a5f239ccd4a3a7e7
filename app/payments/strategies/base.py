"""
Abstract base strategy for payment processing.

This module defines the strategy contract every payment flow implements.
The router picks a strategy by payment method; each strategy decides how
a Payment row reaches a terminal status and when the booking ledger is
touched.

Strategies:
- TraditionalPaymentStrategy: cash, card, transfer; settled immediately
- DevicePaymentStrategy: UPP devices; settled by an external gateway

Usage:
    class VoucherStrategy(PaymentStrategy):
        def process(self, request):
            ...

    PaymentRouter.register_strategy("VOUCHER", VoucherStrategy)
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bookings.models import Booking
    from payments.models import Payment


# =============================================================================
# Request and Result Types
# =============================================================================


@dataclass
class PaymentRequest:
    """
    A validated request to take a payment against a booking.

    Built by the router after the amount is coerced and the booking is
    found, so strategies never re-validate.

    Attributes:
        booking: Booking the payment is for
        amount: Positive amount, two decimal places
        payment_method: PaymentMethod value
        device_type: Device type for device-routed payments
        device_id: Device id for device-routed payments
        customer_email: Payer's email
        currency: ISO 4217 currency code
        description: Payment description
        payment: Set by a strategy once it has committed a Payment row
            outside the settling transaction
    """

    booking: Booking
    amount: Decimal
    payment_method: str
    device_type: str | None = None
    device_id: str | None = None
    customer_email: str = ""
    currency: str = "USD"
    description: str = ""
    payment: Payment | None = None

    @property
    def booking_id(self) -> uuid.UUID:
        return self.booking.id


@dataclass
class PaymentResult:
    """
    Outcome of a payment or refund operation.

    The payment is present whenever a row was persisted, including
    FAILED ones, so callers can show what happened.

    Usage:
        result = payment_router.process_payment(booking.id, Decimal("50"), "CASH")
        if result:
            print(result.payment.id)
        else:
            print(result.message, result.error_code)
    """

    success: bool
    message: str
    payment: Payment | None = None
    error_code: str | None = None

    @classmethod
    def succeeded(cls, payment: Payment, message: str) -> PaymentResult:
        return cls(success=True, message=message, payment=payment)

    @classmethod
    def failed(
        cls,
        message: str,
        payment: Payment | None = None,
        error_code: str | None = None,
    ) -> PaymentResult:
        return cls(success=False, message=message, payment=payment, error_code=error_code)

    def to_response(self) -> dict[str, Any]:
        """Convert to a plain dict suitable for an API or task result."""
        response: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "payment_id": str(self.payment.id) if self.payment else None,
        }
        if self.payment is not None:
            response["status"] = self.payment.status
            response["amount"] = str(self.payment.amount)
        if self.error_code:
            response["error_code"] = self.error_code
        return response

    def __bool__(self) -> bool:
        return self.success


# =============================================================================
# Abstract Strategy
# =============================================================================


class PaymentStrategy(ABC):
    """
    Abstract base class for payment processing strategies.

    A strategy receives a validated PaymentRequest and owns everything
    after that: creating the Payment row, settling it, and applying it
    to the booking ledger in the same transaction as the terminal status.

    Strategies return PaymentResult for expected outcomes (gateway
    declined, gateway timed out). Database errors are raised as
    PersistenceFailure; they and any other exception propagate to the
    router, which records them as a failed payment.
    """

    @abstractmethod
    def process(self, request: PaymentRequest) -> PaymentResult:
        """
        Take the payment described by request.

        Returns:
            PaymentResult with the persisted Payment

        Raises:
            PersistenceFailure: A database write failed; the surrounding
                transaction has been rolled back
        """
