"""Unit tests for the saving level catalog"""

from decimal import Decimal
from savelo_gateway.domain.levels import default_config, get_level, list_levels


def test_list_levels_fixed_order_unique_names():
    """Test catalog order is stable and names are unique"""
    names = [level.name for level in list_levels()]

    assert names == ["Beginner", "Intermediate", "Advanced", "Expert"]
    assert len(set(names)) == len(names)
    assert list_levels() == list_levels()


def test_list_levels_bounds_are_consistent():
    """Test every tier has ordered ranges and a percentage in 0-100"""
    for level in list_levels():
        assert 0 < level.min_days <= level.max_days
        assert 0 < level.min_daily_amount <= level.max_daily_amount
        assert 0 <= level.penalty_percent <= 100


def test_list_levels_returns_copy():
    """Test callers cannot mutate the catalog through the returned list"""
    levels = list_levels()
    levels.clear()
    assert len(list_levels()) == 4


def test_get_level_case_insensitive():
    assert get_level("beginner").name == "Beginner"
    assert get_level("  EXPERT ").name == "Expert"
    assert get_level("Legendary") is None


def test_default_config_uses_range_midpoint():
    """Test pre-filled values are the floor of each range midpoint"""
    beginner = get_level("Beginner")  # 7-14 days, $1-$5
    config = default_config(beginner)

    assert config.level == beginner
    assert config.total_days == 10  # floor(21 / 2)
    assert config.daily_amount == Decimal("3")
