"""
Abstract device gateway contract.

A device gateway settles payments that have to be confirmed by an
external payment-capable device (phone, smart TV, car system...) before
they count. The payment router talks to gateways only through this
interface, so a new device family is added by writing another adapter
and registering it; the routing code does not change.

Usage:
    class AcmeGateway(DeviceGateway):
        def process_payment(self, payment, device_type, device_id):
            ...

    register_gateway(PaymentMethod.UPP_DEVICE, AcmeGateway())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from payments.models import Payment


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class GatewayPaymentResult:
    """
    Outcome of a gateway payment call.

    Attributes:
        success: Whether the gateway settled the payment
        transaction_id: Gateway transaction id
        payment_intent_id: Payment intent id reported by the gateway
        risk_score: Gateway fraud score, when provided
        processed_at: When the gateway settled the payment
        message: Human-readable summary
        error_message: Gateway error when success is False
        raw_response: Parsed response body for auditing
    """

    success: bool
    transaction_id: str | None = None
    payment_intent_id: str | None = None
    risk_score: Any = None
    processed_at: datetime | None = None
    message: str = ""
    error_message: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failed(cls, error_message: str, raw_response: dict[str, Any] | None = None) -> GatewayPaymentResult:
        return cls(
            success=False,
            message="Payment processing failed",
            error_message=error_message,
            raw_response=raw_response or {},
        )


@dataclass
class DeviceRegistration:
    """A device registered with the gateway."""

    device_id: str
    trust_score: Any = None
    expires_at: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Abstract Gateway
# =============================================================================


class DeviceGateway(ABC):
    """
    Abstract base class for device payment gateways.

    process_payment is the only call on the money path. It may return a
    failed GatewayPaymentResult or raise a GatewayError; the router
    treats both as a failed payment. The remaining methods are auxiliary
    and never touch the ledger.
    """

    @abstractmethod
    def process_payment(
        self,
        payment: Payment,
        device_type: str,
        device_id: str,
    ) -> GatewayPaymentResult:
        """
        Charge a payment through a device.

        Called outside any database transaction. Blocks until the
        gateway answers or the configured timeout expires.

        Raises:
            GatewayTimeoutError: Gateway did not answer in time
            GatewayUnavailableError: Gateway unreachable
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the gateway has the settings it needs."""

    @abstractmethod
    def is_service_healthy(self) -> bool:
        """Whether the gateway reports itself healthy."""

    @abstractmethod
    def get_device_capabilities(self, device_type: str) -> dict[str, Any]:
        """Capabilities the gateway supports for a device type."""

    @abstractmethod
    def get_supported_currencies(self) -> dict[str, Any]:
        """Currencies the gateway accepts."""

    @abstractmethod
    def register_device(
        self,
        device_type: str,
        device_id: str,
        capabilities: dict[str, Any],
    ) -> DeviceRegistration:
        """
        Register a device with the gateway.

        Raises:
            GatewayError: If registration fails
        """
