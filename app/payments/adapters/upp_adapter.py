"""
Universal Payment Protocol (UPP) gateway adapter.

Talks to the UPP device-integration service over HTTP. Every UPP call
goes through this adapter so timeouts, error translation and logging are
handled in one place.

Features:
- Configurable timeout on every request
- requests exceptions translated to GatewayError subclasses
- Structured logging with timing metrics

Configuration (via settings):
- UPP_API_BASE_URL: Base URL of the UPP service (default: http://localhost:3000)
- UPP_DEFAULT_DEVICE_ID: Device id used when a payment names none
- UPP_DEFAULT_DEVICE_TYPE: Device type used when a payment names none
- UPP_API_TIMEOUT_SECONDS: Request timeout (default: 10)

Usage:
    from payments.adapters import UppGatewayAdapter

    gateway = UppGatewayAdapter()
    result = gateway.process_payment(payment, "smartphone", "device-123")
    if result.success:
        print(result.transaction_id)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import requests
from django.conf import settings
from django.utils import timezone

from payments.adapters.base import (
    DeviceGateway,
    DeviceRegistration,
    GatewayPaymentResult,
)
from payments.exceptions import (
    GatewayError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)

if TYPE_CHECKING:
    from payments.models import Payment

logger = logging.getLogger(__name__)

PROCESS_PAYMENT_PATH = "/api/v1/payments/process"
REGISTER_DEVICE_PATH = "/api/v1/devices/register"
DEVICE_CAPABILITIES_PATH = "/api/v1/devices/{device_type}/capabilities"
SUPPORTED_CURRENCIES_PATH = "/api/v1/currencies/supported"
HEALTH_PATH = "/health"

FALLBACK_CURRENCIES = {"currencies": ["USD"], "baseCurrency": "USD"}


class UppGatewayAdapter(DeviceGateway):
    """
    HTTP client for the UPP device payment service.

    Settings are read at construction; pass explicit values to override
    them (tests do this to avoid touching Django settings).
    """

    def __init__(
        self,
        base_url: str | None = None,
        default_device_id: str | None = None,
        default_device_type: str | None = None,
        timeout: float | None = None,
    ):
        if base_url is None:
            base_url = getattr(settings, "UPP_API_BASE_URL", "")
        self.base_url = (base_url or "").rstrip("/")
        self.default_device_id = default_device_id or getattr(
            settings, "UPP_DEFAULT_DEVICE_ID", "property_management_system"
        )
        self.default_device_type = default_device_type or getattr(
            settings, "UPP_DEFAULT_DEVICE_TYPE", "smartphone"
        )
        self.timeout = timeout or getattr(settings, "UPP_API_TIMEOUT_SECONDS", 10)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    # =========================================================================
    # Payment Processing
    # =========================================================================

    def process_payment(
        self,
        payment: Payment,
        device_type: str,
        device_id: str,
    ) -> GatewayPaymentResult:
        """
        Charge a payment through a UPP device.

        Returns:
            GatewayPaymentResult; success is False when the service
            answered with an error

        Raises:
            GatewayTimeoutError: The service did not answer in time
            GatewayUnavailableError: The service could not be reached, or
                answered with something that is not JSON
        """
        device_type = device_type or self.default_device_type
        device_id = device_id or self.default_device_id
        booking = payment.booking

        payload = {
            "amount": str(payment.amount),
            "currency": payment.currency,
            "deviceType": device_type,
            "deviceId": device_id,
            "description": payment.description,
            "customerEmail": payment.customer_email,
            "metadata": {
                "booking_id": str(booking.id),
                "room_number": booking.room.room_number,
                "guest_name": booking.guest.full_name,
                "property_management": True,
            },
        }
        headers = {
            "Content-Type": "application/json",
            "X-Device-ID": device_id,
            "X-Device-Type": device_type,
        }
        log_context = {
            "operation": "process_payment",
            "payment_id": str(payment.id),
            "amount": str(payment.amount),
            "device_type": device_type,
            "device_id": device_id,
        }

        start_time = time.time()
        logger.info("Starting UPP operation", extra=log_context)

        try:
            response = requests.post(
                self._url(PROCESS_PAYMENT_PATH),
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            self._log_failure(log_context, start_time, e)
            raise GatewayTimeoutError(
                "UPP service timed out",
                details={"timeout": self.timeout, "original_error": str(e)},
            ) from e
        except requests.RequestException as e:
            self._log_failure(log_context, start_time, e)
            raise GatewayUnavailableError(
                "Connection failed",
                details={"original_error": str(e)},
            ) from e

        body = self._parse_json(response, log_context)
        duration_ms = (time.time() - start_time) * 1000

        if not body.get("success"):
            error_message = body.get("error") or f"UPP service returned HTTP {response.status_code}"
            logger.warning(
                "UPP payment declined",
                extra={
                    **log_context,
                    "status_code": response.status_code,
                    "error": error_message,
                    "duration_ms": duration_ms,
                },
            )
            return GatewayPaymentResult.failed(error_message, raw_response=body)

        logger.info(
            "UPP operation completed",
            extra={
                **log_context,
                "transaction_id": body.get("transaction_id"),
                "duration_ms": duration_ms,
            },
        )
        return GatewayPaymentResult(
            success=True,
            transaction_id=body.get("transaction_id"),
            payment_intent_id=body.get("payment_intent_id"),
            risk_score=body.get("riskScore"),
            processed_at=timezone.now(),
            message="Payment processed successfully",
            raw_response=body,
        )

    # =========================================================================
    # Auxiliary Operations
    # =========================================================================

    def is_configured(self) -> bool:
        return bool(self.base_url)

    def is_service_healthy(self) -> bool:
        """Check the service health endpoint. Any error counts as unhealthy."""
        try:
            response = requests.get(self._url(HEALTH_PATH), timeout=self.timeout)
            response.raise_for_status()
            return response.json().get("status") == "healthy"
        except (requests.RequestException, ValueError) as e:
            logger.warning("UPP health check failed", extra={"error": str(e)})
            return False

    def get_device_capabilities(self, device_type: str) -> dict[str, Any]:
        """Fetch capabilities for a device type; empty dict when unavailable."""
        url = self._url(DEVICE_CAPABILITIES_PATH.format(device_type=device_type))
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Failed to fetch UPP device capabilities",
                extra={"device_type": device_type, "error": str(e)},
            )
            return {}
        return body.get("capabilities") or {}

    def get_supported_currencies(self) -> dict[str, Any]:
        """Fetch supported currencies; falls back to USD only."""
        try:
            response = requests.get(self._url(SUPPORTED_CURRENCIES_PATH), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Failed to fetch UPP currencies", extra={"error": str(e)})
            return dict(FALLBACK_CURRENCIES)

    def register_device(
        self,
        device_type: str,
        device_id: str,
        capabilities: dict[str, Any],
    ) -> DeviceRegistration:
        """
        Register a device with the UPP service.

        Raises:
            GatewayError: If the service rejects the registration or
                cannot be reached
        """
        payload = {
            "deviceType": device_type,
            "capabilities": capabilities,
            "fingerprint": f"{device_type}_{device_id}_{int(time.time() * 1000)}",
        }
        headers = {
            "Content-Type": "application/json",
            "X-Device-ID": device_id,
            "X-Device-Type": device_type,
        }
        log_context = {
            "operation": "register_device",
            "device_type": device_type,
            "device_id": device_id,
        }
        start_time = time.time()

        try:
            response = requests.post(
                self._url(REGISTER_DEVICE_PATH),
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self._log_failure(log_context, start_time, e)
            raise GatewayError(
                f"Device registration failed: {e}",
                details={"device_type": device_type, "device_id": device_id},
            ) from e

        body = self._parse_json(response, log_context)
        if not body.get("success"):
            raise GatewayError(
                f"Device registration failed: {body.get('error', 'unknown error')}",
                details={"device_type": device_type, "device_id": device_id},
            )

        logger.info(
            "UPP device registered",
            extra={**log_context, "registered_device_id": body.get("deviceId")},
        )
        return DeviceRegistration(
            device_id=body.get("deviceId") or device_id,
            trust_score=body.get("trustScore"),
            expires_at=body.get("expiresAt"),
            raw_response=body,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _parse_json(response: requests.Response, log_context: dict[str, Any]) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                "UPP service returned a non-JSON response",
                extra={**log_context, "status_code": response.status_code},
            )
            raise GatewayUnavailableError(
                f"UPP service returned an unreadable response (HTTP {response.status_code})",
                details={"status_code": response.status_code},
            ) from e
        if not isinstance(body, dict):
            raise GatewayUnavailableError(
                "UPP service returned an unexpected response shape",
                details={"status_code": response.status_code},
            )
        return body

    @staticmethod
    def _log_failure(log_context: dict[str, Any], start_time: float, error: Exception) -> None:
        logger.error(
            "UPP operation failed",
            extra={
                **log_context,
                "error_type": type(error).__name__,
                "error": str(error),
                "duration_ms": (time.time() - start_time) * 1000,
            },
        )
