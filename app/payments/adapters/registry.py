"""
Capability-keyed registry of device gateways.

Maps a payment method to the gateway that settles it. The UPP adapter is
registered for UPP_DEVICE lazily, on first lookup, so importing this
module never reads settings.

Usage:
    from payments.adapters.registry import get_gateway, register_gateway

    gateway = get_gateway(PaymentMethod.UPP_DEVICE)

    # In tests
    register_gateway(PaymentMethod.UPP_DEVICE, mock_gateway)
"""

from __future__ import annotations

from collections.abc import Callable

from payments.adapters.base import DeviceGateway
from payments.exceptions import GatewayError
from payments.state_machines import PaymentMethod

_DEFAULT_FACTORIES: dict[str, Callable[[], DeviceGateway]] = {}
_GATEWAYS: dict[str, DeviceGateway] = {}


def _upp_gateway() -> DeviceGateway:
    from payments.adapters.upp_adapter import UppGatewayAdapter

    return UppGatewayAdapter()


_DEFAULT_FACTORIES[PaymentMethod.UPP_DEVICE] = _upp_gateway


def register_gateway(payment_method: str, gateway: DeviceGateway) -> None:
    """Register (or replace) the gateway for a payment method."""
    _GATEWAYS[payment_method] = gateway


def unregister_gateway(payment_method: str) -> None:
    """Drop a registered gateway; the default factory applies again."""
    _GATEWAYS.pop(payment_method, None)


def get_gateway(payment_method: str) -> DeviceGateway:
    """
    Get the gateway for a payment method.

    Raises:
        GatewayError: If no gateway handles the payment method
    """
    gateway = _GATEWAYS.get(payment_method)
    if gateway is None:
        factory = _DEFAULT_FACTORIES.get(payment_method)
        if factory is None:
            supported = ", ".join(sorted(set(_GATEWAYS) | set(_DEFAULT_FACTORIES)))
            raise GatewayError(
                f"No gateway registered for {payment_method}. Supported: {supported}",
                details={"payment_method": payment_method},
            )
        gateway = factory()
        _GATEWAYS[payment_method] = gateway
    return gateway
