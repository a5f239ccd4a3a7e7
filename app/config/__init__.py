# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings and Celery configuration for the rental ledger.
#
# Import Celery app to ensure it's loaded when Django starts, so shared_task
# functions bind to it and auto-discovery finds bookings/payments tasks.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
