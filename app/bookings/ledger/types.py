"""
Money handling for the booking ledger.

All monetary values are exact base-10 Decimals with two decimal places.
Binary floats are rejected outright instead of being rounded.

Usage:
    from bookings.ledger.types import ZERO, to_money

    to_money("50")          # Decimal("50.00")
    to_money(Decimal("1.5"))  # Decimal("1.50")
    to_money(0.1)           # raises InvalidAmount
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from bookings.exceptions import InvalidAmount

MONEY_MAX_DIGITS = 12
MONEY_DECIMAL_PLACES = 2

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyInput = Union[Decimal, int, str]


def to_money(value: MoneyInput) -> Decimal:
    """
    Coerce a value into a two-place Decimal.

    Args:
        value: Decimal, int, or numeric string

    Returns:
        Decimal quantized to cents

    Raises:
        InvalidAmount: For floats, non-numeric input, NaN/Infinity, or
            values with sub-cent precision
    """
    if isinstance(value, (float, bool)) or value is None:
        raise InvalidAmount(
            f"Unsupported monetary value: {value!r}",
            details={"value": repr(value)},
        )

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmount(
            f"Invalid monetary value: {value!r}",
            details={"value": repr(value)},
        ) from exc

    if not amount.is_finite():
        raise InvalidAmount(
            f"Invalid monetary value: {value!r}",
            details={"value": repr(value)},
        )

    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise InvalidAmount(
            f"Monetary values cannot have more than {MONEY_DECIMAL_PLACES} decimal places",
            details={"value": str(amount)},
        )
    return quantized


def require_positive(value: MoneyInput, label: str = "Amount") -> Decimal:
    """Coerce to money and reject zero or negative values."""
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmount(
            f"{label} must be positive",
            details={"amount": str(amount)},
        )
    return amount
