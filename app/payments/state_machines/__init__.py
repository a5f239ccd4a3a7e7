"""
State machine enums for payments.

Usage:
    from payments.state_machines import DeviceType, PaymentMethod, PaymentStatus
"""

from payments.state_machines.states import DeviceType, PaymentMethod, PaymentStatus

__all__ = [
    "DeviceType",
    "PaymentMethod",
    "PaymentStatus",
]
