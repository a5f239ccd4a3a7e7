"""
Tests for PaymentRouter.

Device gateway calls go through a MagicMock registered for UPP_DEVICE;
the booking ledger and database are real.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from django.db import DatabaseError

from bookings.ledger.services import booking_ledger
from bookings.models import Booking, Transaction
from bookings.states import BookingPaymentStatus, TransactionType
from payments.adapters.base import DeviceRegistration, GatewayPaymentResult
from payments.exceptions import GatewayError, GatewayTimeoutError
from payments.models import Payment
from payments.services import PaymentRouter
from payments.state_machines import PaymentMethod, PaymentStatus
from payments.strategies import (
    DevicePaymentStrategy,
    PaymentRequest,
    PaymentResult,
    PaymentStrategy,
    TraditionalPaymentStrategy,
)
from payments.tests.factories import PaymentFactory


def _booking(booking_id):
    return Booking.objects.get(pk=booking_id)


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10.00"), "abc", 10.5])
    def test_invalid_amount_persists_nothing(self, charged_booking, amount):
        result = PaymentRouter.process_payment(charged_booking.id, amount, PaymentMethod.CASH)

        assert not result.success
        assert result.error_code == "INVALID_AMOUNT"
        assert result.payment is None
        assert not Payment.objects.exists()

    def test_unknown_booking(self, db):
        result = PaymentRouter.process_payment(uuid4(), Decimal("50.00"), PaymentMethod.CASH)

        assert not result.success
        assert result.error_code == "BOOKING_NOT_FOUND"
        assert result.message.startswith("Payment processing failed: ")
        assert not Payment.objects.exists()

    def test_unknown_method(self, charged_booking):
        result = PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), "BITCOIN")

        assert not result.success
        assert result.error_code == "INVALID_PAYMENT_METHOD"
        assert not Payment.objects.exists()


# =============================================================================
# Traditional payments
# =============================================================================


class TestTraditionalPayments:
    def test_cash_payment(self, charged_booking):
        result = PaymentRouter.process_payment(
            charged_booking.id,
            Decimal("50.00"),
            PaymentMethod.CASH,
            customer_email="jane@example.com",
        )

        assert result.success
        assert result.message == "Payment processed successfully"
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.amount == Decimal("50.00")
        assert payment.currency == "USD"
        assert payment.processed_at is not None
        assert payment.description == "Payment for Room 101 - Jane Doe"

        booking = _booking(charged_booking.id)
        assert booking.total_payments == Decimal("50.00")
        assert booking.current_balance == Decimal("150.00")
        assert booking.payment_status == BookingPaymentStatus.PARTIAL

    @pytest.mark.parametrize("method", [PaymentMethod.CARD, PaymentMethod.TRANSFER])
    def test_other_front_desk_methods(self, charged_booking, method):
        result = PaymentRouter.process_payment(charged_booking.id, "200", method)

        assert result.success
        assert result.payment.payment_method == method
        assert _booking(charged_booking.id).payment_status == BookingPaymentStatus.PAID

    def test_room_line_references_payment(self, charged_booking):
        result = PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), PaymentMethod.CASH)

        line = Transaction.objects.get(booking_id=charged_booking.id, transaction_type=TransactionType.PAYMENT)
        assert line.reference_number == str(result.payment.id)

    def test_ledger_failure_rolls_back_payment(self, charged_booking):
        with patch(
            "payments.strategies.traditional.booking_ledger.apply_payment",
            side_effect=DatabaseError("database went away"),
        ):
            result = PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), PaymentMethod.CASH)

        assert not result.success
        assert result.message == "Payment processing failed: database went away"
        assert result.error_code == "PERSISTENCE_FAILURE"
        assert result.payment is None
        assert not Payment.objects.exists()
        assert _booking(charged_booking.id).total_payments == Decimal("0.00")

    def test_programming_error_has_its_own_code(self, charged_booking):
        with patch(
            "payments.strategies.traditional.booking_ledger.apply_payment",
            side_effect=TypeError("unsupported operand"),
        ):
            result = PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), PaymentMethod.CASH)

        assert not result.success
        assert result.error_code == "UNEXPECTED_ERROR"
        assert result.message == "Payment processing failed: unsupported operand"
        assert not Payment.objects.exists()

    def test_booking_locked_before_payment_insert(self, charged_booking):
        real_lock = booking_ledger.lock_booking
        payments_at_lock = []

        def lock(booking_id):
            payments_at_lock.append(Payment.objects.filter(booking_id=booking_id).count())
            return real_lock(booking_id)

        with patch.object(booking_ledger, "lock_booking", side_effect=lock):
            result = PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), PaymentMethod.CASH)

        assert result.success
        assert payments_at_lock == [0]

    def test_sequential_payments_accumulate(self, charged_booking):
        PaymentRouter.process_payment(charged_booking.id, Decimal("50.00"), PaymentMethod.CASH)
        PaymentRouter.process_payment(charged_booking.id, Decimal("30.00"), PaymentMethod.CARD)

        booking = _booking(charged_booking.id)
        assert booking.total_payments == Decimal("80.00")
        assert booking.current_balance == Decimal("120.00")


# =============================================================================
# Device payments
# =============================================================================


class TestDevicePayments:
    def test_success(self, charged_booking, mock_gateway, gateway_success):
        mock_gateway.process_payment.return_value = gateway_success

        result = PaymentRouter.process_payment(
            charged_booking.id,
            Decimal("75.00"),
            PaymentMethod.UPP_DEVICE,
            device_type="smartphone",
            device_id="phone-1",
        )

        assert result.success
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.upp_transaction_id == "tx_123"
        assert payment.stripe_payment_intent_id == "pi_123"
        assert payment.device_type == "smartphone"
        assert payment.device_id == "phone-1"
        assert payment.metadata["upp_transaction_id"] == "tx_123"
        assert payment.metadata["upp_payment_intent_id"] == "pi_123"
        assert payment.metadata["upp_risk_score"] == 42
        assert payment.metadata["upp_device_type"] == "smartphone"
        assert payment.metadata["upp_device_id"] == "phone-1"
        assert payment.metadata["upp_processed_at"] == "2026-10-19T12:00:00+00:00"

        booking = _booking(charged_booking.id)
        assert booking.total_payments == Decimal("75.00")
        assert booking.current_balance == Decimal("125.00")

    def test_gateway_called_with_pending_payment(self, charged_booking, mock_gateway, gateway_success):
        seen = {}

        def process(payment, device_type, device_id):
            seen["status"] = Payment.objects.get(pk=payment.pk).status
            return gateway_success

        mock_gateway.process_payment.side_effect = process

        PaymentRouter.process_payment(charged_booking.id, Decimal("75.00"), PaymentMethod.UPP_DEVICE)

        assert seen["status"] == PaymentStatus.PENDING

    def test_default_device_from_settings(self, charged_booking, mock_gateway, gateway_success, settings):
        settings.UPP_DEFAULT_DEVICE_ID = "property_management_system"
        settings.UPP_DEFAULT_DEVICE_TYPE = "smartphone"
        mock_gateway.process_payment.return_value = gateway_success

        result = PaymentRouter.process_payment(charged_booking.id, Decimal("75.00"), PaymentMethod.UPP_DEVICE)

        _, device_type, device_id = mock_gateway.process_payment.call_args.args
        assert (device_type, device_id) == ("smartphone", "property_management_system")
        assert result.payment.device_id == "property_management_system"

    def test_declined_leaves_booking_unchanged(self, charged_booking, mock_gateway):
        mock_gateway.process_payment.return_value = GatewayPaymentResult.failed("Device offline")

        result = PaymentRouter.process_payment(
            charged_booking.id,
            Decimal("75.00"),
            PaymentMethod.UPP_DEVICE,
            device_type="smart_tv",
            device_id="tv-7",
        )

        assert not result.success
        assert result.message == "UPP payment failed: Device offline"
        assert result.error_code == "GATEWAY_FAILURE"
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.FAILED
        assert payment.metadata["upp_error"] == "Device offline"
        assert payment.metadata["upp_device_type"] == "smart_tv"
        assert payment.metadata["upp_device_id"] == "tv-7"

        booking = _booking(charged_booking.id)
        assert booking.total_payments == Decimal("0.00")
        assert booking.current_balance == Decimal("200.00")
        assert not Transaction.objects.filter(
            booking_id=charged_booking.id, transaction_type=TransactionType.PAYMENT
        ).exists()

    @pytest.mark.parametrize(
        "error",
        [
            GatewayTimeoutError("UPP service timed out"),
            GatewayError("Connection failed"),
            ConnectionResetError("Connection reset by peer"),
        ],
    )
    def test_gateway_exception_fails_payment(self, charged_booking, mock_gateway, error):
        mock_gateway.process_payment.side_effect = error

        result = PaymentRouter.process_payment(charged_booking.id, Decimal("75.00"), PaymentMethod.UPP_DEVICE)

        assert not result.success
        assert result.message.startswith("UPP payment failed: ")
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.FAILED
        assert payment.metadata["error"]
        assert _booking(charged_booking.id).total_payments == Decimal("0.00")

    def test_timeout_error_code(self, charged_booking, mock_gateway):
        mock_gateway.process_payment.side_effect = GatewayTimeoutError("UPP service timed out")

        result = PaymentRouter.process_payment(charged_booking.id, Decimal("75.00"), PaymentMethod.UPP_DEVICE)

        assert result.error_code == "GATEWAY_TIMEOUT"
        assert result.message == "UPP payment failed: UPP service timed out"

    def test_ledger_failure_after_gateway_marks_failed(self, charged_booking, mock_gateway, gateway_success):
        mock_gateway.process_payment.return_value = gateway_success

        with patch(
            "payments.strategies.device.booking_ledger.apply_payment",
            side_effect=DatabaseError("database went away"),
        ):
            result = PaymentRouter.process_payment(
                charged_booking.id, Decimal("75.00"), PaymentMethod.UPP_DEVICE
            )

        assert not result.success
        assert result.error_code == "PERSISTENCE_FAILURE"
        assert result.message == "Payment processing failed: database went away"
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.FAILED
        assert payment.metadata["error"] == "database went away"
        assert payment.upp_transaction_id == ""
        assert _booking(charged_booking.id).total_payments == Decimal("0.00")

    def test_missing_gateway_fails_payment(self, charged_booking, monkeypatch):
        monkeypatch.setattr(PaymentRouter, "STRATEGIES", dict(PaymentRouter.STRATEGIES))
        PaymentRouter.register_strategy("WALLET_DEVICE", DevicePaymentStrategy)

        result = PaymentRouter.process_payment(charged_booking.id, Decimal("20.00"), "WALLET_DEVICE")

        assert not result.success
        assert result.error_code == "GATEWAY_ERROR"
        assert result.message.startswith("UPP payment failed: No gateway registered for WALLET_DEVICE")
        payment = Payment.objects.get(pk=result.payment.pk)
        assert payment.status == PaymentStatus.FAILED
        assert payment.metadata["error"].startswith("No gateway registered")
        assert _booking(charged_booking.id).total_payments == Decimal("0.00")

    def test_injected_gateway(self, charged_booking, mock_gateway, gateway_success):
        injected = MagicMock()
        injected.process_payment.return_value = gateway_success
        strategy = DevicePaymentStrategy(gateway=injected)

        result = strategy.process(
            PaymentRequest(
                booking=charged_booking,
                amount=Decimal("20.00"),
                payment_method=PaymentMethod.UPP_DEVICE,
                device_type="smartwatch",
                device_id="watch-1",
            )
        )

        assert result.success
        injected.process_payment.assert_called_once()
        mock_gateway.process_payment.assert_not_called()


# =============================================================================
# Strategy registry
# =============================================================================


class TestStrategyRegistry:
    def test_builtin_mapping(self):
        assert isinstance(PaymentRouter.get_strategy(PaymentMethod.CASH), TraditionalPaymentStrategy)
        assert isinstance(PaymentRouter.get_strategy(PaymentMethod.UPP_DEVICE), DevicePaymentStrategy)

    def test_unregistered_method_uses_traditional(self):
        assert isinstance(PaymentRouter.get_strategy("SOMETHING_ELSE"), TraditionalPaymentStrategy)

    def test_register_strategy(self, charged_booking, monkeypatch):
        monkeypatch.setattr(PaymentRouter, "STRATEGIES", dict(PaymentRouter.STRATEGIES))

        class VoucherStrategy(PaymentStrategy):
            def process(self, request):
                return PaymentResult.failed("Vouchers are paused", error_code="VOUCHERS_PAUSED")

        PaymentRouter.register_strategy("VOUCHER", VoucherStrategy)

        result = PaymentRouter.process_payment(charged_booking.id, Decimal("10.00"), "VOUCHER")

        assert result.error_code == "VOUCHERS_PAUSED"
        assert PaymentRouter.STRATEGIES["VOUCHER"] is VoucherStrategy


# =============================================================================
# Queries
# =============================================================================


class TestPaymentHistory:
    def test_newest_first_active_only(self, booking):
        older = PaymentFactory(booking=booking)
        newer = PaymentFactory(booking=booking)
        hidden = PaymentFactory(booking=booking, is_active=False)
        PaymentFactory()  # another booking

        history = PaymentRouter.get_payment_history(booking.id)

        assert set(history) == {older, newer}
        assert hidden not in history
        assert history == sorted(history, key=lambda p: p.created_at, reverse=True)

    def test_empty(self, booking):
        assert PaymentRouter.get_payment_history(booking.id) == []


class TestPaymentStatistics:
    def test_empty(self, db):
        stats = PaymentRouter.get_payment_statistics()

        assert stats.total_payments == 0
        assert stats.total_upp_amount == Decimal("0.00")
        assert stats.recent_payments == []

    def test_counts_and_totals(self, booking):
        PaymentFactory(booking=booking, status=PaymentStatus.COMPLETED)
        PaymentFactory(booking=booking, status=PaymentStatus.FAILED, payment_method=PaymentMethod.CARD)
        PaymentFactory(
            booking=booking,
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.UPP_DEVICE,
            amount=Decimal("75.00"),
        )
        PaymentFactory(
            booking=booking,
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.UPP_DEVICE,
            amount=Decimal("25.00"),
        )
        PaymentFactory(
            booking=booking,
            status=PaymentStatus.FAILED,
            payment_method=PaymentMethod.UPP_DEVICE,
            amount=Decimal("500.00"),
        )
        PaymentFactory(booking=booking, status=PaymentStatus.PENDING)

        stats = PaymentRouter.get_payment_statistics()

        assert stats.total_payments == 6
        assert stats.completed_payments == 3
        assert stats.failed_payments == 2
        assert stats.pending_payments == 1
        assert stats.upp_payments == 3
        assert stats.traditional_payments == 3
        assert stats.by_method[PaymentMethod.CARD] == 1
        assert stats.total_upp_amount == Decimal("100.00")

    def test_recent_limit(self, booking):
        for _ in range(4):
            PaymentFactory(booking=booking)

        stats = PaymentRouter.get_payment_statistics(recent_limit=2)

        assert len(stats.recent_payments) == 2
        assert stats.to_dict()["total_payments"] == 4


# =============================================================================
# Device gateway pass-throughs
# =============================================================================


class TestDevicePassThroughs:
    def test_status_calls(self, mock_gateway):
        mock_gateway.is_configured.return_value = True
        mock_gateway.is_service_healthy.return_value = False
        mock_gateway.get_device_capabilities.return_value = {"nfc": True}
        mock_gateway.get_supported_currencies.return_value = {"currencies": ["USD"]}

        assert PaymentRouter.is_device_gateway_configured() is True
        assert PaymentRouter.is_device_service_healthy() is False
        assert PaymentRouter.get_device_capabilities("smartphone") == {"nfc": True}
        assert PaymentRouter.get_supported_currencies() == {"currencies": ["USD"]}
        mock_gateway.get_device_capabilities.assert_called_once_with("smartphone")

    def test_register_device_success(self, mock_gateway):
        registration = DeviceRegistration(device_id="dev_1", trust_score=0.8)
        mock_gateway.register_device.return_value = registration

        result = PaymentRouter.register_device("smartphone", "phone-1", {"nfc": True})

        assert result.success
        assert result.data is registration
        mock_gateway.register_device.assert_called_once_with("smartphone", "phone-1", {"nfc": True})

    def test_register_device_failure(self, mock_gateway):
        mock_gateway.register_device.side_effect = GatewayError("Device registration failed: Untrusted")

        result = PaymentRouter.register_device("smartphone", "phone-1")

        assert not result.success
        assert result.error_code == "GATEWAY_ERROR"
        assert "Untrusted" in result.error
