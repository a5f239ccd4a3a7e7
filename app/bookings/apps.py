"""
Bookings app configuration.

This app provides the booking ledger and room transaction ledger:
- Booking charge/payment totals and derived payment status
- Append-only room transactions with running balances
- Periodic room balance reconciliation (Celery)
"""

from django.apps import AppConfig


class BookingsConfig(AppConfig):
    """Configuration for the bookings application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "bookings"
    verbose_name = "Bookings"
