"""
Payments app for booking payments and refunds.

This app handles:
- Recording cash, card and transfer payments at the front desk
- Settling UPP device payments through the device gateway
- Refunding completed payments
- Payment history and statistics

Related apps:
    - bookings: Booking ledger every settled payment is applied to

Usage:
    from payments.services import PaymentRouter, RefundService

    result = PaymentRouter.process_payment(booking.id, Decimal("50.00"), "CASH")
    refund = RefundService.refund_payment(result.payment.id, Decimal("10.00"))
"""
