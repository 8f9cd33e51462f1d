"""Reward distribution - completion bonus and community pool share"""

from decimal import Decimal
from savelo_gateway.domain.models import Entitlement, Plan, PlanState, RewardPool
from savelo_gateway.domain.penalties import compute_completion_reward, compute_total_savings
from savelo_gateway.domain.state_machine import derive_state
from savelo_gateway.utils.units import quantize


def compute_pool_share(pool: RewardPool, claimant_savings: Decimal) -> Decimal:
    """
    Pro-rata share of forfeited penalties for one completer.

    share = pool.balance * claimant_savings / pool.total_completed_savings

    Returns 0 for an empty pool or when no completed savings are reported.
    """
    if pool.balance <= 0 or pool.total_completed_savings <= 0 or claimant_savings <= 0:
        return Decimal(0)
    share = pool.balance * claimant_savings / pool.total_completed_savings
    return quantize(min(share, pool.balance), 2)


def compute_entitlement(plan: Plan, pool: RewardPool) -> Entitlement:
    """
    What the owner may withdraw, based only on ledger-reported figures.

    - Completed: full savings + 20% bonus + pool share + remaining stake
    - Failed: savings actually paid + whatever stake the ledger left
    - Otherwise nothing is withdrawable yet
    """
    state = derive_state(plan.plan_id, plan)
    stake = plan.stake_remaining if plan.stake_remaining is not None else Decimal(0)

    if state == PlanState.COMPLETED:
        total_savings = compute_total_savings(plan.daily_amount, plan.total_days)
        return Entitlement(
            savings_paid=quantize(total_savings, 2),
            completion_reward=quantize(compute_completion_reward(total_savings), 2),
            pool_share=compute_pool_share(pool, total_savings),
            stake_returned=quantize(stake, 2),
        )

    if state == PlanState.FAILED:
        return Entitlement(
            savings_paid=quantize(compute_total_savings(plan.daily_amount, plan.current_day), 2),
            completion_reward=Decimal("0.00"),
            pool_share=Decimal("0.00"),
            stake_returned=quantize(stake, 2),
        )

    zero = Decimal("0.00")
    return Entitlement(savings_paid=zero, completion_reward=zero, pool_share=zero, stake_returned=zero)
