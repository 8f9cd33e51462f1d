"""Unit tests for the plan lifecycle state machine"""

from savelo_gateway.domain.models import PlanContext, PlanState
from savelo_gateway.domain.state_machine import (
    build_calendar,
    can_pay_today,
    days_elapsed_since_start,
    days_until_next_payment_due,
    derive_state,
    derive_view,
    progress_percent,
)

DAY = 86_400
START = 1_700_000_000


def test_derive_state_without_plan_id():
    assert derive_state(None, None) == PlanState.UNINITIALIZED


def test_derive_state_not_yet_fetched(make_plan):
    """Test a known id with no record yet is pending"""
    assert derive_state(7, None) == PlanState.PENDING_START
    assert derive_state(7, make_plan(is_active=False, start_time=0)) == PlanState.PENDING_START


def test_derive_state_precedence(make_plan):
    """Test completed beats failed beats active"""
    assert derive_state(1, make_plan()) == PlanState.ACTIVE
    assert derive_state(1, make_plan(is_failed=True)) == PlanState.FAILED
    assert derive_state(1, make_plan(is_completed=True, is_failed=True)) == PlanState.COMPLETED
    # Terminal flags win even if the ledger still reports active
    assert derive_state(1, make_plan(is_active=True, is_completed=True)) == PlanState.COMPLETED


def test_terminal_states():
    assert PlanState.COMPLETED.is_terminal
    assert PlanState.FAILED.is_terminal
    assert not PlanState.ACTIVE.is_terminal
    assert not PlanState.PENDING_START.is_terminal


def test_days_elapsed_since_start(make_plan):
    plan = make_plan(start_time=START)

    assert days_elapsed_since_start(plan, START) == 0
    assert days_elapsed_since_start(plan, START + DAY - 1) == 0
    assert days_elapsed_since_start(plan, START + 5 * DAY + 100) == 5
    # Clock skew before start never goes negative
    assert days_elapsed_since_start(plan, START - DAY) == 0
    assert days_elapsed_since_start(make_plan(start_time=0), START) == 0


def test_days_until_next_payment_due_behind_schedule(make_plan):
    """Test 3 paid days, started 5 days ago -> max(0, 5 - 3 + 1) = 3"""
    plan = make_plan(current_day=3, start_time=START)
    assert days_until_next_payment_due(plan, START + 5 * DAY) == 3


def test_days_until_next_payment_due_ahead_of_schedule(make_plan):
    """Test paying ahead never produces a negative count"""
    plan = make_plan(current_day=4, start_time=START)

    assert days_until_next_payment_due(plan, START + 2 * DAY) == 0
    assert days_until_next_payment_due(make_plan(start_time=0), START) == 0


def test_can_pay_today(make_plan):
    active = make_plan()

    assert can_pay_today(PlanState.ACTIVE, active) is True
    assert can_pay_today(PlanState.COMPLETED, make_plan(is_completed=True)) is False
    assert can_pay_today(PlanState.PENDING_START, active) is False
    assert can_pay_today(PlanState.ACTIVE, None) is False


def test_progress_percent():
    """Test progress is clamped and never divides by zero"""
    assert progress_percent(0, 0) == 0
    assert progress_percent(5, 10) == 50.0
    assert progress_percent(12, 10) == 100.0
    assert progress_percent(-1, 10) == 0.0


def test_derive_view_active(make_plan):
    plan = make_plan(plan_id=4, total_days=10, current_day=3, missed_days=1, start_time=START)
    view = derive_view(PlanContext(plan_id=4, plan=plan, now=START + 5 * DAY))

    assert view.state == PlanState.ACTIVE
    assert view.days_elapsed_since_start == 5
    assert view.days_until_next_payment_due == 3
    assert view.is_behind_schedule is True
    assert view.can_pay_today is True
    assert view.progress_percent == 30.0
    assert view.completed_days == 3
    assert view.missed_days == 1
    assert view.days_remaining == 7
    assert view.plan is plan


def test_derive_view_zero_day_plan(make_plan):
    """Test a zero-length plan renders 0% instead of failing"""
    view = derive_view(PlanContext(plan_id=1, plan=make_plan(total_days=0), now=START))
    assert view.progress_percent == 0


def test_derive_view_uninitialized():
    view = derive_view(PlanContext(plan_id=None, plan=None, now=START))

    assert view.state == PlanState.UNINITIALIZED
    assert view.can_pay_today is False
    assert view.plan is None


def test_derive_view_is_idempotent(make_plan):
    """Test deriving twice from the same record gives identical results"""
    context = PlanContext(plan_id=1, plan=make_plan(current_day=2, start_time=START), now=START + 4 * DAY)
    assert derive_view(context) == derive_view(context)


def test_derive_view_completed_is_not_payable(make_plan):
    plan = make_plan(is_active=False, is_completed=True, current_day=10)
    view = derive_view(PlanContext(plan_id=1, plan=plan, now=START + 20 * DAY))

    assert view.state == PlanState.COMPLETED
    assert view.can_pay_today is False
    assert view.progress_percent == 100.0


def test_build_calendar_statuses(make_plan):
    """Test paid, missed, due-today and upcoming cells"""
    plan = make_plan(total_days=7, current_day=2, missed_days=2)
    calendar = build_calendar(plan, payable=True)

    assert [day.day_number for day in calendar] == [1, 2, 3, 4, 5, 6, 7]
    assert [day.status for day in calendar] == [
        "completed",
        "completed",
        "missed",
        "missed",
        "upcoming",
        "upcoming",
        "upcoming",
    ]


def test_build_calendar_today_marker(make_plan):
    plan = make_plan(total_days=4, current_day=1, missed_days=0)

    assert build_calendar(plan, payable=True)[1].status == "today"
    assert build_calendar(plan, payable=False)[1].status == "upcoming"


def test_derive_view_terminal_plan_is_never_overdue(make_plan):
    """Test a finished 7-day plan started 30 days ago reports nothing due"""
    completed = make_plan(total_days=7, current_day=7, is_active=False, is_completed=True)
    failed = make_plan(total_days=7, current_day=2, missed_days=5, is_active=False, is_failed=True)

    for plan in (completed, failed):
        view = derive_view(PlanContext(plan_id=1, plan=plan, now=START + 30 * DAY))
        assert view.days_until_next_payment_due == 0
        assert view.is_behind_schedule is False
        assert view.days_elapsed_since_start == 30
