"""
Pytest fixtures for payment tests.

Provides bookings with charges already posted, payments in each status,
and a mock device gateway registered for UPP_DEVICE.

Usage:
    def test_device_payment(charged_booking, mock_gateway):
        mock_gateway.process_payment.return_value = GatewayPaymentResult(success=True, ...)
"""

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from bookings.ledger.services import booking_ledger
from bookings.tests.factories import BookingFactory, GuestFactory, RoomFactory
from payments.adapters.base import DeviceGateway, GatewayPaymentResult
from payments.adapters.registry import register_gateway, unregister_gateway
from payments.services import PaymentRouter
from payments.state_machines import PaymentMethod, PaymentStatus
from payments.tests.factories import PaymentFactory


# =============================================================================
# Booking Fixtures
# =============================================================================


@pytest.fixture
def booking(db):
    """Active booking in room 101 for Jane Doe, nothing charged."""
    return BookingFactory(
        room=RoomFactory(room_number="101"),
        guest=GuestFactory(first_name="Jane", last_name="Doe", email="jane@example.com"),
    )


@pytest.fixture
def charged_booking(booking):
    """Booking with 200.00 charged through the ledger."""
    return booking_ledger.apply_charge(booking.id, Decimal("200.00"))


# =============================================================================
# Payment State Fixtures
# =============================================================================


@pytest.fixture
def pending_payment(db, booking):
    """Create a pending payment."""
    return PaymentFactory(booking=booking, status=PaymentStatus.PENDING)


@pytest.fixture
def completed_payment(db, booking):
    """Create a completed payment (ledger not applied)."""
    return PaymentFactory(booking=booking, status=PaymentStatus.COMPLETED)


@pytest.fixture
def failed_payment(db, booking):
    """Create a failed payment."""
    return PaymentFactory(booking=booking, status=PaymentStatus.FAILED)


@pytest.fixture
def paid_cash(charged_booking):
    """A 100.00 cash payment taken through the router against a 200.00 charge."""
    result = PaymentRouter.process_payment(charged_booking.id, Decimal("100.00"), PaymentMethod.CASH)
    assert result.success
    return result.payment


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def gateway_success():
    """A successful gateway answer."""
    return GatewayPaymentResult(
        success=True,
        transaction_id="tx_123",
        payment_intent_id="pi_123",
        risk_score=42,
        processed_at=datetime(2026, 10, 19, 12, 0, tzinfo=dt_timezone.utc),
        message="Payment processed successfully",
        raw_response={"success": True, "transaction_id": "tx_123"},
    )


@pytest.fixture
def mock_gateway():
    """
    Register a MagicMock gateway for UPP_DEVICE for the duration of a test.

    The mock is unregistered afterwards so the real adapter is used again.
    """
    gateway = MagicMock(spec=DeviceGateway)
    register_gateway(PaymentMethod.UPP_DEVICE, gateway)
    yield gateway
    unregister_gateway(PaymentMethod.UPP_DEVICE)
