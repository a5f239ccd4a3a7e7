"""
Celery tasks for payment housekeeping.

This module provides periodic tasks for:
- Failing device payments stuck in PENDING after a worker crash

A device payment is committed as PENDING before the gateway is called.
If the process dies before the gateway answer is recorded, the row stays
PENDING forever and never reaches the booking ledger. The sweep below
closes such rows as FAILED so they show up in statistics and can be
retried by staff.

Usage:
    from payments.tasks import fail_stale_pending_payments

    # Typically via celery-beat
    fail_stale_pending_payments.delay()
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from payments.models import Payment
from payments.state_machines import PaymentStatus

logger = logging.getLogger(__name__)

STALE_PENDING_REASON = "Gateway result was never recorded"


@shared_task
def fail_stale_pending_payments(minutes: int | None = None) -> dict:
    """
    Mark payments PENDING for longer than the threshold as FAILED.

    Args:
        minutes: Age threshold; defaults to PAYMENT_PENDING_TIMEOUT_MINUTES

    Returns:
        Dict with count of payments failed
    """
    if minutes is None:
        minutes = getattr(settings, "PAYMENT_PENDING_TIMEOUT_MINUTES", 30)
    threshold = timezone.now() - timedelta(minutes=minutes)

    stale_ids = list(
        Payment.objects.filter(
            status=PaymentStatus.PENDING,
            created_at__lt=threshold,
        ).values_list("id", flat=True)
    )

    failed_count = 0
    for payment_id in stale_ids:
        with transaction.atomic():
            payment = Payment.objects.select_for_update().get(id=payment_id)
            # Settled between the query and the lock
            if not payment.is_pending:
                continue
            payment.fail(reason=STALE_PENDING_REASON)
            payment.save()
        failed_count += 1
        logger.warning(
            "Failed stale pending payment",
            extra={
                "payment_id": str(payment_id),
                "booking_id": str(payment.booking_id),
                "payment_method": payment.payment_method,
            },
        )

    logger.info(
        "Stale pending payment sweep completed",
        extra={"failed_count": failed_count, "threshold_minutes": minutes},
    )
    return {"status": "completed", "failed_count": failed_count}
