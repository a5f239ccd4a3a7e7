"""
Payment model: one monetary movement against one Booking.

A positive amount is money received from the guest, a negative amount is
a refund. Refunds are separate Payment rows linked to the original; the
original row is never modified by a refund.

Usage:
    from payments.models import Payment
    from payments.state_machines import PaymentMethod

    payment = Payment.objects.create(
        booking=booking,
        amount=Decimal("50.00"),
        payment_method=PaymentMethod.CASH,
    )

    # State transitions using django-fsm
    payment.complete()  # PENDING -> COMPLETED
    payment.save()
"""

from __future__ import annotations

from datetime import datetime

from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import ActiveFlagMixin, MetadataMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import DeviceType, PaymentMethod, PaymentStatus


class Payment(UUIDPrimaryKeyMixin, ActiveFlagMixin, MetadataMixin, BaseModel):
    """
    A single payment or refund recorded against a booking.

    Uses django-fsm for the status lifecycle. The status field is
    protected: it only changes through complete() or fail(), and each
    Payment transitions out of PENDING exactly once.

    Fields:
        booking: Booking the money moved against
        amount: Signed amount (negative for refunds)
        currency: ISO 4217 currency code
        payment_method: CASH / CARD / TRANSFER / UPP_DEVICE
        status: PENDING / COMPLETED / FAILED (FSM, protected)
        customer_email: Payer's email, passed to the gateway
        description: Human-readable description
        processed_at: When the payment reached COMPLETED
        device_type / device_id: Device used for a UPP payment
        upp_transaction_id: Gateway transaction id (or "<original>_refund")
        stripe_payment_intent_id: Payment intent id reported by the gateway
        refunded_payment: For refunds, the payment being refunded
        metadata: Gateway-supplied details (risk score, errors...)

    Constraints:
        - amount is never zero
    """

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Signed amount; negative for refunds",
    )
    currency = models.CharField(max_length=3, default="USD")
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        db_index=True,
    )
    status = FSMField(
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
    )
    customer_email = models.EmailField(blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")
    processed_at = models.DateTimeField(null=True, blank=True)

    # Device-routed payments
    device_type = models.CharField(max_length=50, blank=True, default="")
    device_id = models.CharField(max_length=255, blank=True, default="")
    upp_transaction_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        db_index=True,
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, default="")

    refunded_payment = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        related_name="refunds",
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(amount=0),
                name="payment_amount_non_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["booking", "created_at"], name="payment_booking_created_idx"),
            models.Index(fields=["status", "payment_method"], name="payment_status_method_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment({self.id}, {self.status}, {self.amount} {self.currency})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.COMPLETED,
    )
    def complete(self, processed_at: datetime | None = None):
        """
        Mark the payment as settled.

        Transition: PENDING -> COMPLETED
        """
        self.processed_at = processed_at or timezone.now()

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.FAILED,
    )
    def fail(self, reason: str = ""):
        """
        Mark the payment as failed.

        Transition: PENDING -> FAILED
        """
        if reason:
            self.set_meta("failure_reason", reason, save=False)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == PaymentStatus.FAILED

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    @property
    def is_refund(self) -> bool:
        return self.amount is not None and self.amount < 0

    @property
    def is_device_payment(self) -> bool:
        return self.payment_method == PaymentMethod.UPP_DEVICE

    @property
    def device_type_display(self) -> str:
        """Human label for the device type, or the raw value if unknown."""
        if not self.device_type:
            return ""
        try:
            return DeviceType(self.device_type).label
        except ValueError:
            return self.device_type
