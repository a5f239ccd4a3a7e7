"""
Payments app configuration.

This app takes money against bookings:
- Payment records with a PENDING -> COMPLETED / FAILED lifecycle
- Strategy routing for front-desk and UPP device payments
- Refunds as linked negative payments
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
