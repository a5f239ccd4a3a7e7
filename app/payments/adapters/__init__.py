"""
Device gateway adapters.

Usage:
    from payments.adapters import UppGatewayAdapter, get_gateway
"""

from payments.adapters.base import (
    DeviceGateway,
    DeviceRegistration,
    GatewayPaymentResult,
)
from payments.adapters.registry import get_gateway, register_gateway, unregister_gateway
from payments.adapters.upp_adapter import UppGatewayAdapter

__all__ = [
    "DeviceGateway",
    "DeviceRegistration",
    "GatewayPaymentResult",
    "UppGatewayAdapter",
    "get_gateway",
    "register_gateway",
    "unregister_gateway",
]
