"""
Tests for the UPP gateway adapter.

HTTP is mocked at the requests module used by the adapter; no network
access happens.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from payments.adapters import UppGatewayAdapter
from payments.exceptions import GatewayError, GatewayTimeoutError, GatewayUnavailableError
from payments.state_machines import PaymentMethod
from payments.tests.factories import PaymentFactory

BASE_URL = "http://upp.test"


def _response(body=None, status_code=200, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


@pytest.fixture
def adapter():
    return UppGatewayAdapter(base_url=BASE_URL, timeout=5)


@pytest.fixture
def device_payment(booking):
    return PaymentFactory(
        booking=booking,
        amount=Decimal("75.00"),
        payment_method=PaymentMethod.UPP_DEVICE,
        customer_email="jane@example.com",
        description="Payment for Room 101 - Jane Doe",
    )


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    def test_reads_settings(self, settings):
        settings.UPP_API_BASE_URL = "http://upp.internal:3000/"
        settings.UPP_DEFAULT_DEVICE_ID = "front_desk"
        settings.UPP_DEFAULT_DEVICE_TYPE = "smart_tv"
        settings.UPP_API_TIMEOUT_SECONDS = 3

        adapter = UppGatewayAdapter()

        assert adapter.base_url == "http://upp.internal:3000"
        assert adapter.default_device_id == "front_desk"
        assert adapter.default_device_type == "smart_tv"
        assert adapter.timeout == 3
        assert adapter.is_configured()

    def test_not_configured_without_base_url(self):
        assert not UppGatewayAdapter(base_url="").is_configured()


# =============================================================================
# Payment Processing
# =============================================================================


class TestProcessPayment:
    @patch("payments.adapters.upp_adapter.requests.post")
    def test_success(self, mock_post, adapter, device_payment):
        mock_post.return_value = _response(
            {
                "success": True,
                "transaction_id": "tx_123",
                "payment_intent_id": "pi_123",
                "riskScore": 42,
            }
        )

        result = adapter.process_payment(device_payment, "smartphone", "phone-1")

        assert result.success
        assert result.transaction_id == "tx_123"
        assert result.payment_intent_id == "pi_123"
        assert result.risk_score == 42
        assert result.processed_at is not None

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_request_shape(self, mock_post, adapter, device_payment):
        mock_post.return_value = _response({"success": True, "transaction_id": "tx_1"})

        adapter.process_payment(device_payment, "smartphone", "phone-1")

        args, kwargs = mock_post.call_args
        assert args[0] == f"{BASE_URL}/api/v1/payments/process"
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["X-Device-ID"] == "phone-1"
        assert kwargs["headers"]["X-Device-Type"] == "smartphone"
        body = kwargs["json"]
        assert body["amount"] == "75.00"
        assert body["currency"] == "USD"
        assert body["deviceType"] == "smartphone"
        assert body["customerEmail"] == "jane@example.com"
        assert body["metadata"] == {
            "booking_id": str(device_payment.booking_id),
            "room_number": "101",
            "guest_name": "Jane Doe",
            "property_management": True,
        }

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_defaults_device_when_missing(self, mock_post, device_payment):
        adapter = UppGatewayAdapter(
            base_url=BASE_URL,
            default_device_id="pms",
            default_device_type="smartphone",
        )
        mock_post.return_value = _response({"success": True, "transaction_id": "tx_1"})

        adapter.process_payment(device_payment, "", "")

        headers = mock_post.call_args.kwargs["headers"]
        assert headers["X-Device-ID"] == "pms"
        assert headers["X-Device-Type"] == "smartphone"

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_declined(self, mock_post, adapter, device_payment):
        mock_post.return_value = _response({"success": False, "error": "Device offline"}, status_code=402)

        result = adapter.process_payment(device_payment, "smartphone", "phone-1")

        assert not result.success
        assert result.error_message == "Device offline"
        assert result.message == "Payment processing failed"

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_declined_without_error_text(self, mock_post, adapter, device_payment):
        mock_post.return_value = _response({"success": False}, status_code=500)

        result = adapter.process_payment(device_payment, "smartphone", "phone-1")

        assert result.error_message == "UPP service returned HTTP 500"

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_timeout(self, mock_post, adapter, device_payment):
        mock_post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(GatewayTimeoutError) as exc_info:
            adapter.process_payment(device_payment, "smartphone", "phone-1")

        assert exc_info.value.error_code == "GATEWAY_TIMEOUT"

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_connection_error(self, mock_post, adapter, device_payment):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(GatewayUnavailableError):
            adapter.process_payment(device_payment, "smartphone", "phone-1")

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_unreadable_response(self, mock_post, adapter, device_payment):
        mock_post.return_value = _response(status_code=502, json_error=True)

        with pytest.raises(GatewayUnavailableError):
            adapter.process_payment(device_payment, "smartphone", "phone-1")


# =============================================================================
# Auxiliary Operations
# =============================================================================


class TestAuxiliary:
    @patch("payments.adapters.upp_adapter.requests.get")
    def test_healthy(self, mock_get, adapter):
        mock_get.return_value = _response({"status": "healthy"})

        assert adapter.is_service_healthy()
        assert mock_get.call_args.args[0] == f"{BASE_URL}/health"

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_unhealthy_on_error(self, mock_get, adapter):
        mock_get.side_effect = requests.ConnectionError("refused")

        assert not adapter.is_service_healthy()

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_unhealthy_on_degraded_status(self, mock_get, adapter):
        mock_get.return_value = _response({"status": "degraded"})

        assert not adapter.is_service_healthy()

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_capabilities(self, mock_get, adapter):
        mock_get.return_value = _response({"capabilities": {"nfc": True, "biometric": False}})

        capabilities = adapter.get_device_capabilities("smartphone")

        assert capabilities == {"nfc": True, "biometric": False}
        assert mock_get.call_args.args[0] == f"{BASE_URL}/api/v1/devices/smartphone/capabilities"

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_capabilities_empty_on_failure(self, mock_get, adapter):
        mock_get.return_value = _response({}, status_code=404)

        assert adapter.get_device_capabilities("toaster") == {}

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_supported_currencies(self, mock_get, adapter):
        mock_get.return_value = _response({"currencies": ["USD", "EUR"], "baseCurrency": "USD"})

        assert adapter.get_supported_currencies()["currencies"] == ["USD", "EUR"]

    @patch("payments.adapters.upp_adapter.requests.get")
    def test_supported_currencies_fallback(self, mock_get, adapter):
        mock_get.side_effect = requests.Timeout()

        assert adapter.get_supported_currencies() == {"currencies": ["USD"], "baseCurrency": "USD"}


class TestRegisterDevice:
    @patch("payments.adapters.upp_adapter.time.time", return_value=1760000000.5)
    @patch("payments.adapters.upp_adapter.requests.post")
    def test_success(self, mock_post, _mock_time, adapter):
        mock_post.return_value = _response(
            {
                "success": True,
                "deviceId": "dev_99",
                "trustScore": 0.9,
                "expiresAt": "2026-12-31T00:00:00Z",
            }
        )

        registration = adapter.register_device("smartphone", "phone-1", {"nfc": True})

        assert registration.device_id == "dev_99"
        assert registration.trust_score == 0.9
        assert registration.expires_at == "2026-12-31T00:00:00Z"
        body = mock_post.call_args.kwargs["json"]
        assert body["fingerprint"] == "smartphone_phone-1_1760000000500"
        assert body["capabilities"] == {"nfc": True}
        assert mock_post.call_args.args[0] == f"{BASE_URL}/api/v1/devices/register"

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_rejected(self, mock_post, adapter):
        mock_post.return_value = _response({"success": False, "error": "Untrusted device"})

        with pytest.raises(GatewayError) as exc_info:
            adapter.register_device("smartphone", "phone-1", {})

        assert "Untrusted device" in exc_info.value.message

    @patch("payments.adapters.upp_adapter.requests.post")
    def test_unreachable(self, mock_post, adapter):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(GatewayError):
            adapter.register_device("smartphone", "phone-1", {})
