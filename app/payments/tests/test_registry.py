"""
Tests for the device gateway registry.
"""

from unittest.mock import MagicMock

import pytest

from payments.adapters import UppGatewayAdapter
from payments.adapters.base import DeviceGateway
from payments.adapters.registry import get_gateway, register_gateway, unregister_gateway
from payments.exceptions import GatewayError
from payments.state_machines import PaymentMethod


@pytest.fixture(autouse=True)
def clean_registry():
    unregister_gateway(PaymentMethod.UPP_DEVICE)
    yield
    unregister_gateway(PaymentMethod.UPP_DEVICE)
    unregister_gateway("VOUCHER")


def test_upp_adapter_is_default():
    gateway = get_gateway(PaymentMethod.UPP_DEVICE)

    assert isinstance(gateway, UppGatewayAdapter)
    assert get_gateway(PaymentMethod.UPP_DEVICE) is gateway


def test_registered_gateway_wins():
    custom = MagicMock(spec=DeviceGateway)

    register_gateway(PaymentMethod.UPP_DEVICE, custom)

    assert get_gateway(PaymentMethod.UPP_DEVICE) is custom


def test_new_method_can_be_registered():
    custom = MagicMock(spec=DeviceGateway)

    register_gateway("VOUCHER", custom)

    assert get_gateway("VOUCHER") is custom


def test_unknown_method():
    with pytest.raises(GatewayError, match="No gateway registered for CASH") as exc_info:
        get_gateway(PaymentMethod.CASH)

    assert exc_info.value.error_code == "GATEWAY_ERROR"
    assert exc_info.value.details == {"payment_method": "CASH"}
