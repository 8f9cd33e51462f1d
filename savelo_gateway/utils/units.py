"""Token unit and display currency helpers"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Any, Optional

SECONDS_PER_DAY = 86_400


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a number or numeric string to a finite Decimal, or None"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


def quantize(amount: Decimal, places: int) -> Decimal:
    """Round half-up to a fixed number of decimal places"""
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def parse_units(amount: Any, decimals: int) -> int:
    """
    Convert a human token amount to integer base units.

    Example:
        parse_units("1.5", 18) -> 1500000000000000000
    """
    value = to_decimal(amount)
    if value is None:
        raise ValueError(f"Invalid token amount: {amount!r}")
    return int((value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))


def format_units(base_units: int, decimals: int) -> str:
    """Convert integer base units back to a human amount string"""
    value = Decimal(base_units) / (Decimal(10) ** decimals)
    return format(value.normalize(), "f")


def usd_to_celo(usd: Any, rate: Decimal) -> Decimal:
    value = to_decimal(usd) or Decimal(0)
    if rate <= 0:
        return Decimal(0)
    return quantize(value / rate, 4)


def format_usd_with_celo(usd: Any, rate: Decimal) -> str:
    """Render a USD amount with its CELO equivalent, e.g. "$1.60 (10.0000 CELO)" """
    value = to_decimal(usd) or Decimal(0)
    return f"${quantize(value, 2)} ({usd_to_celo(value, rate)} CELO)"


def short_address(address: str) -> str:
    """0x1234...abcd form used in wallet badges"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
