"""Plan lifecycle state machine - derives display state from a ledger record"""

from typing import List, Optional
from savelo_gateway.domain.models import CalendarDay, Plan, PlanContext, PlanState, PlanView
from savelo_gateway.utils.units import SECONDS_PER_DAY

# Enforced by the ledger; surfaced here for display only
GRACE_PERIOD_DAYS = 2


def derive_state(plan_id: Optional[int], plan: Optional[Plan]) -> PlanState:
    """
    Map a plan id and its fetched record to a lifecycle state.

    Order matters: completed wins over failed, both win over active, so a
    terminal record can never be read back as ACTIVE.
    """
    if plan_id is None:
        return PlanState.UNINITIALIZED
    if plan is None:
        return PlanState.PENDING_START
    if plan.is_completed:
        return PlanState.COMPLETED
    if plan.is_failed:
        return PlanState.FAILED
    if plan.is_active:
        return PlanState.ACTIVE
    return PlanState.PENDING_START


def days_elapsed_since_start(plan: Plan, now: int) -> int:
    if plan.start_time <= 0 or now < plan.start_time:
        return 0
    return (now - plan.start_time) // SECONDS_PER_DAY


def days_until_next_payment_due(plan: Plan, now: int) -> int:
    """Days the user is behind; > 0 means payments are overdue"""
    if plan.start_time <= 0:
        return 0
    return max(0, days_elapsed_since_start(plan, now) - plan.current_day + 1)


def can_pay_today(state: PlanState, plan: Optional[Plan]) -> bool:
    if state != PlanState.ACTIVE or plan is None:
        return False
    return not plan.is_completed and not plan.is_failed


def progress_percent(completed_days: int, total_days: int) -> float:
    if total_days <= 0:
        return 0.0
    return max(0.0, min(100.0, completed_days / total_days * 100))


def derive_view(context: PlanContext) -> PlanView:
    """Pure derivation: same context in, same view out"""
    state = derive_state(context.plan_id, context.plan)
    plan = context.plan

    if plan is None:
        return PlanView(
            plan_id=context.plan_id,
            state=state,
            days_elapsed_since_start=0,
            days_until_next_payment_due=0,
            can_pay_today=False,
            progress_percent=0.0,
            completed_days=0,
            missed_days=0,
            days_remaining=0,
        )

    # Overdue counters only mean something while the plan is running
    overdue = days_until_next_payment_due(plan, context.now) if state == PlanState.ACTIVE else 0

    return PlanView(
        plan_id=context.plan_id,
        state=state,
        days_elapsed_since_start=days_elapsed_since_start(plan, context.now),
        days_until_next_payment_due=overdue,
        can_pay_today=can_pay_today(state, plan),
        progress_percent=progress_percent(plan.current_day, plan.total_days),
        completed_days=plan.current_day,
        missed_days=plan.missed_days,
        days_remaining=max(0, plan.total_days - plan.current_day),
        plan=plan,
    )


def build_calendar(plan: Plan, payable: bool) -> List[CalendarDay]:
    """One cell per plan day: paid, missed, due today, or still ahead"""
    calendar = []
    for day_number in range(1, plan.total_days + 1):
        if day_number <= plan.current_day:
            status = "completed"
        elif day_number <= plan.current_day + plan.missed_days:
            status = "missed"
        elif day_number == plan.current_day + 1 and payable:
            status = "today"
        else:
            status = "upcoming"
        calendar.append(CalendarDay(day_number=day_number, status=status))
    return calendar
