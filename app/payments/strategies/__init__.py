"""
Payment strategies for different payment flows.

Usage:
    from payments.strategies import PaymentRequest, TraditionalPaymentStrategy

    result = TraditionalPaymentStrategy().process(
        PaymentRequest(booking=booking, amount=Decimal("50.00"), payment_method="CASH")
    )
"""

from payments.strategies.base import PaymentRequest, PaymentResult, PaymentStrategy
from payments.strategies.device import DevicePaymentStrategy
from payments.strategies.traditional import TraditionalPaymentStrategy

__all__ = [
    "DevicePaymentStrategy",
    "PaymentRequest",
    "PaymentResult",
    "PaymentStrategy",
    "TraditionalPaymentStrategy",
]
