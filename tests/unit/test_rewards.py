"""Unit tests for completion bonus and community pool distribution"""

from decimal import Decimal
from savelo_gateway.domain.models import RewardPool
from savelo_gateway.domain.rewards import compute_entitlement, compute_pool_share


def test_compute_pool_share_pro_rata():
    """Test a completer receives pool * own savings / all completed savings"""
    pool = RewardPool(balance=Decimal("12"), total_completed_savings=Decimal("300"))
    assert compute_pool_share(pool, Decimal("100")) == Decimal("4.00")


def test_compute_pool_share_empty_pool():
    assert compute_pool_share(RewardPool(Decimal("0"), Decimal("300")), Decimal("100")) == 0
    assert compute_pool_share(RewardPool(Decimal("12"), Decimal("0")), Decimal("100")) == 0


def test_compute_pool_share_never_exceeds_pool():
    """Test stale totals cannot pay out more than the pool holds"""
    pool = RewardPool(balance=Decimal("10"), total_completed_savings=Decimal("50"))
    assert compute_pool_share(pool, Decimal("100")) == Decimal("10.00")


def test_entitlement_completed(make_plan):
    """Test full savings + 20% + pool share + remaining stake"""
    plan = make_plan(
        daily_amount=Decimal("5"),
        total_days=7,
        current_day=7,
        is_active=False,
        is_completed=True,
        stake_remaining=Decimal("0.50"),
    )
    pool = RewardPool(balance=Decimal("7"), total_completed_savings=Decimal("70"))

    entitlement = compute_entitlement(plan, pool)

    assert entitlement.savings_paid == Decimal("35.00")
    assert entitlement.completion_reward == Decimal("7.00")
    assert entitlement.pool_share == Decimal("3.50")
    assert entitlement.stake_returned == Decimal("0.50")
    assert entitlement.total == Decimal("46.00")


def test_entitlement_failed(make_plan):
    """Test a failed plan returns what was paid and what is left of the stake"""
    plan = make_plan(
        daily_amount=Decimal("5"),
        total_days=7,
        current_day=3,
        is_active=False,
        is_failed=True,
        stake_remaining=Decimal("0"),
    )
    entitlement = compute_entitlement(plan, RewardPool(Decimal("100"), Decimal("1000")))

    assert entitlement.savings_paid == Decimal("15.00")
    assert entitlement.completion_reward == 0
    assert entitlement.pool_share == 0
    assert entitlement.total == Decimal("15.00")


def test_entitlement_active_has_nothing_to_withdraw(make_plan):
    entitlement = compute_entitlement(make_plan(current_day=3), RewardPool(Decimal("5"), Decimal("50")))
    assert entitlement.total == 0
