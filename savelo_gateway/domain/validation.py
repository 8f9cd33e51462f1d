"""Plan configuration checks against a saving level's bounds"""

from decimal import Decimal
from typing import Any, Optional
from savelo_gateway.domain.models import SavingLevel, PlanConfig
from savelo_gateway.domain.exceptions import ValidationError
from savelo_gateway.utils.units import to_decimal


def _to_days(days: Any) -> Optional[int]:
    if isinstance(days, bool):
        return None
    if isinstance(days, int):
        return days
    if isinstance(days, float):
        return int(days) if days.is_integer() else None
    if isinstance(days, Decimal):
        return int(days) if days.is_finite() and days == days.to_integral_value() else None
    if isinstance(days, str):
        try:
            return int(days.strip())
        except ValueError:
            return None
    return None


def _to_amount(amount: Any) -> Optional[Decimal]:
    value = to_decimal(amount)
    if value is None or value <= 0:
        return None
    return value


def is_valid_days(level: Optional[SavingLevel], days: Any) -> bool:
    if level is None:
        return False
    value = _to_days(days)
    return value is not None and level.min_days <= value <= level.max_days


def is_valid_daily_amount(level: Optional[SavingLevel], amount: Any) -> bool:
    if level is None:
        return False
    value = _to_amount(amount)
    return value is not None and level.min_daily_amount <= value <= level.max_daily_amount


def can_create_plan(level: Optional[SavingLevel], days: Any, amount: Any) -> bool:
    return level is not None and is_valid_days(level, days) and is_valid_daily_amount(level, amount)


def validate_plan_config(level: Optional[SavingLevel], days: Any, amount: Any) -> PlanConfig:
    """
    Build a PlanConfig or explain which bound was violated.

    Raises:
        ValidationError: If no level is chosen or days/amount fall outside it
    """
    if level is None:
        raise ValidationError("Choose a saving level first")
    if not is_valid_days(level, days):
        raise ValidationError(
            f"Number of days must be a whole number between {level.min_days} and {level.max_days}"
        )
    if not is_valid_daily_amount(level, amount):
        raise ValidationError(
            f"Daily amount must be between ${level.min_daily_amount} and ${level.max_daily_amount} USD"
        )
    return PlanConfig(level=level, total_days=_to_days(days), daily_amount=_to_amount(amount))
