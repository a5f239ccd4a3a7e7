"""
Bookings models package.

Re-exports all models for convenient importing:
    from bookings.models import Booking, Guest, Room, Transaction
"""

from bookings.models.booking import Booking
from bookings.models.room import Guest, Room
from bookings.models.transaction import ImmutableTransactionError, Transaction

__all__ = [
    "Booking",
    "Guest",
    "ImmutableTransactionError",
    "Room",
    "Transaction",
]
