"""
Payment services.

Usage:
    from payments.services import PaymentRouter, RefundService
"""

from payments.services.payment_router import PaymentRouter, PaymentStatistics
from payments.services.refund_service import RefundService

__all__ = [
    "PaymentRouter",
    "PaymentStatistics",
    "RefundService",
]
