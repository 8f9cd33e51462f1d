"""Unit tests for plan configuration validation"""

import pytest
from decimal import Decimal
from savelo_gateway.domain.exceptions import ValidationError
from savelo_gateway.domain.levels import get_level, list_levels
from savelo_gateway.domain.validation import (
    can_create_plan,
    is_valid_daily_amount,
    is_valid_days,
    validate_plan_config,
)


@pytest.mark.parametrize("level", list_levels(), ids=lambda level: level.name)
def test_is_valid_days_inclusive_bounds(level):
    """Test every day count inside the range passes and the neighbours fail"""
    for days in range(level.min_days, level.max_days + 1):
        assert is_valid_days(level, days) is True

    assert is_valid_days(level, level.min_days - 1) is False
    assert is_valid_days(level, level.max_days + 1) is False


def test_is_valid_days_requires_integer():
    """Test non-integer and non-numeric day counts are rejected"""
    level = get_level("Beginner")  # 7-14 days

    assert is_valid_days(level, "10") is True
    assert is_valid_days(level, 10.0) is True
    assert is_valid_days(level, 10.5) is False
    assert is_valid_days(level, "ten") is False
    assert is_valid_days(level, True) is False
    assert is_valid_days(level, None) is False


def test_is_valid_daily_amount_bounds():
    """Test amount must be positive, finite and within the tier"""
    level = get_level("Intermediate")  # $5-$20

    assert is_valid_daily_amount(level, 5) is True
    assert is_valid_daily_amount(level, "20") is True
    assert is_valid_daily_amount(level, Decimal("12.50")) is True
    assert is_valid_daily_amount(level, "4.99") is False
    assert is_valid_daily_amount(level, 20.01) is False
    assert is_valid_daily_amount(level, 0) is False
    assert is_valid_daily_amount(level, -10) is False
    assert is_valid_daily_amount(level, float("inf")) is False
    assert is_valid_daily_amount(level, "NaN") is False
    assert is_valid_daily_amount(level, "") is False


def test_no_level_is_never_valid():
    assert is_valid_days(None, 10) is False
    assert is_valid_daily_amount(None, 3) is False
    assert can_create_plan(None, 10, 3) is False


def test_can_create_plan_needs_both_bounds():
    """Test creation is offered only when days and amount both fit"""
    level = get_level("Beginner")  # 7-14 days, $1-$5

    assert can_create_plan(level, 10, 3) is True
    assert can_create_plan(level, 20, 3) is False
    assert can_create_plan(level, 10, 30) is False


def test_validate_plan_config_builds_config():
    level = get_level("Beginner")
    config = validate_plan_config(level, "14", "2.50")

    assert config.total_days == 14
    assert config.daily_amount == Decimal("2.50")
    assert config.level == level


def test_validate_plan_config_explains_violation():
    """Test error message names the violated bound"""
    level = get_level("Beginner")

    with pytest.raises(ValidationError, match="between 7 and 14"):
        validate_plan_config(level, 3, 2)

    with pytest.raises(ValidationError, match="Daily amount"):
        validate_plan_config(level, 10, 50)

    with pytest.raises(ValidationError, match="level"):
        validate_plan_config(None, 10, 2)
