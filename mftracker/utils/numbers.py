"""
Numeric helpers shared by the scoring and planning engines.
All rounding is ROUND_HALF_UP so scores and messages agree.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number (or numeric string) to Decimal without float noise.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip().replace(",", ""))
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """Round to `places` decimal places, ties away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_pct(value: Number) -> str:
    """Percentage with exactly one decimal, e.g. 41.7"""
    return str(round_half_up(value, 1))


def format_amount(value: Number) -> str:
    """Currency amount without trailing zeros: 2000, -150.5"""
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return str(amount.normalize())
