"""
Payment models package.

Re-exports all models for convenient importing:
    from payments.models import Payment
"""

from payments.models.payment import Payment

__all__ = [
    "Payment",
]
