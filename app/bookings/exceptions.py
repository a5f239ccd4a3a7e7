"""
Booking ledger exceptions.

Exception Hierarchy:
    LedgerError (base)
    ├── BookingNotFound - Booking lookup failures
    ├── RoomNotFound - Room lookup failures
    └── InvalidAmount - Non-positive or malformed monetary amounts

Usage:
    from bookings.exceptions import BookingNotFound, InvalidAmount

    raise InvalidAmount(
        "Charge amount must be positive",
        details={"amount": str(amount)},
    )
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError


class LedgerError(BaseApplicationError):
    """Base exception for booking and room ledger operations."""

    default_error_code: str = "LEDGER_ERROR"


class BookingNotFound(LedgerError):
    """
    Raised when a referenced booking does not exist.

    Surfaced to the caller with no state change; no Payment is created
    for an unknown booking.
    """

    default_error_code: str = "BOOKING_NOT_FOUND"


class RoomNotFound(LedgerError):
    """Raised when a referenced room does not exist."""

    default_error_code: str = "ROOM_NOT_FOUND"


class InvalidAmount(LedgerError):
    """
    Raised for non-positive or malformed monetary amounts.

    Always raised before anything is persisted.
    """

    default_error_code: str = "INVALID_AMOUNT"
