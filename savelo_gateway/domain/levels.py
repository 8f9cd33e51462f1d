"""Saving level catalog - the fixed table of challenge tiers"""

from decimal import Decimal
from typing import List, Optional
from savelo_gateway.domain.models import SavingLevel, PlanConfig

# Ordered easiest to hardest; names are unique
SAVING_LEVELS: tuple[SavingLevel, ...] = (
    SavingLevel(
        name="Beginner",
        description="Build the habit with a short streak and small daily amounts",
        min_days=7,
        max_days=14,
        min_daily_amount=Decimal("1"),
        max_daily_amount=Decimal("5"),
        penalty_percent=10,
    ),
    SavingLevel(
        name="Intermediate",
        description="A few weeks of steady saving",
        min_days=15,
        max_days=30,
        min_daily_amount=Decimal("5"),
        max_daily_amount=Decimal("20"),
        penalty_percent=15,
    ),
    SavingLevel(
        name="Advanced",
        description="Two months of commitment with a bigger stake",
        min_days=31,
        max_days=60,
        min_daily_amount=Decimal("20"),
        max_daily_amount=Decimal("50"),
        penalty_percent=20,
    ),
    SavingLevel(
        name="Expert",
        description="A full quarter, highest penalty",
        min_days=61,
        max_days=90,
        min_daily_amount=Decimal("50"),
        max_daily_amount=Decimal("100"),
        penalty_percent=25,
    ),
)


def list_levels() -> List[SavingLevel]:
    """Return the catalog in display order"""
    return list(SAVING_LEVELS)


def get_level(name: str) -> Optional[SavingLevel]:
    """Case-insensitive lookup by level name"""
    wanted = name.strip().lower()
    for level in SAVING_LEVELS:
        if level.name.lower() == wanted:
            return level
    return None


def default_config(level: SavingLevel) -> PlanConfig:
    """
    Pre-filled configuration when a level is first selected.

    Both days and daily amount start at the floor of their range midpoint,
    e.g. Beginner (7-14 days, $1-$5) -> 10 days at $3.
    """
    days = (level.min_days + level.max_days) // 2
    amount = (level.min_daily_amount + level.max_daily_amount) // 2
    return PlanConfig(level=level, total_days=days, daily_amount=Decimal(amount))
