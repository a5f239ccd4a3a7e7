"""
Pytest fixtures for booking tests.

Usage:
    def test_charge(charged_booking):
        assert charged_booking.current_balance == Decimal("200.00")
"""

from decimal import Decimal

import pytest

from bookings.ledger.services import booking_ledger
from bookings.tests.factories import BookingFactory, GuestFactory, RoomFactory


@pytest.fixture
def room(db):
    """Create a vacant room."""
    return RoomFactory(room_number="101")


@pytest.fixture
def guest(db):
    """Create a guest."""
    return GuestFactory(first_name="Jane", last_name="Doe", email="jane@example.com")


@pytest.fixture
def booking(db, room, guest):
    """Create an active booking with nothing charged yet."""
    return BookingFactory(room=room, guest=guest)


@pytest.fixture
def charged_booking(booking):
    """Booking with a 200.00 charge posted through the ledger."""
    return booking_ledger.apply_charge(booking.id, Decimal("200.00"), description="Two nights")
