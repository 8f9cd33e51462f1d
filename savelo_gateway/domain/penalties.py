"""Penalty stake and savings arithmetic"""

from decimal import Decimal
from typing import Any
from savelo_gateway.domain.models import PlanConfig, PlanQuote
from savelo_gateway.utils.units import to_decimal, quantize

COMPLETION_REWARD_RATE = Decimal("0.20")


def compute_daily_penalty_stake(daily_amount: Any, penalty_percent: Any, places: int = 2) -> Decimal:
    """
    Stake put at risk for each day of the plan.

    stake = daily_amount * penalty_percent / 100, rounded half-up to
    `places` decimals (2 for USD display, token decimals on-chain).

    Non-positive or non-numeric amounts yield 0 so the form can always render.
    """
    amount = to_decimal(daily_amount)
    percent = to_decimal(penalty_percent)
    if amount is None or amount <= 0 or percent is None:
        return Decimal(0)
    return quantize(amount * percent / 100, places)


def compute_total_savings(daily_amount: Any, total_days: int) -> Decimal:
    amount = to_decimal(daily_amount) or Decimal(0)
    return amount * total_days


def compute_completion_reward(total_savings: Any) -> Decimal:
    """Flat 20% bonus on total savings, independent of the level"""
    savings = to_decimal(total_savings) or Decimal(0)
    return savings * COMPLETION_REWARD_RATE


def compute_completion_reward_units(total_savings_units: int) -> int:
    """Same bonus in integer token base units (truncating)"""
    return total_savings_units * 20 // 100


def quote_plan(config: PlanConfig) -> PlanQuote:
    total = compute_total_savings(config.daily_amount, config.total_days)
    return PlanQuote(
        penalty_stake=compute_daily_penalty_stake(config.daily_amount, config.level.penalty_percent),
        total_savings=quantize(total, 2),
        completion_reward=quantize(compute_completion_reward(total), 2),
    )
