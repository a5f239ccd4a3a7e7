"""
Payment state and method enums.

All enums use Django's TextChoices for database storage.

Usage:
    from payments.state_machines import PaymentMethod, PaymentStatus

    if payment.status == PaymentStatus.COMPLETED:
        ...
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    Lifecycle of a Payment.

    State Flow:
        PENDING -> COMPLETED
        PENDING -> FAILED

    Both COMPLETED and FAILED are terminal.
    """

    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"


class PaymentMethod(models.TextChoices):
    """
    How the guest paid.

    CASH, CARD and TRANSFER are settled when recorded. UPP_DEVICE needs a
    round trip to the Universal Payment Protocol gateway first. New
    methods are wired up by registering a strategy with PaymentRouter.
    """

    CASH = "CASH", "Cash"
    CARD = "CARD", "Credit/Debit Card"
    TRANSFER = "TRANSFER", "Bank Transfer"
    UPP_DEVICE = "UPP_DEVICE", "UPP Device"


class DeviceType(models.TextChoices):
    """Device families the UPP gateway knows how to charge through."""

    SMARTPHONE = "smartphone", "Smartphone"
    SMART_TV = "smart_tv", "Smart TV"
    IOT_DEVICE = "iot_device", "IoT Device"
    VOICE_ASSISTANT = "voice_assistant", "Voice Assistant"
    GAMING_CONSOLE = "gaming_console", "Gaming Console"
    SMARTWATCH = "smartwatch", "Smartwatch"
    CAR_SYSTEM = "car_system", "Car System"
