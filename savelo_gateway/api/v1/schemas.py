"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import List, Optional, Union
from pydantic import BaseModel, Field

from savelo_gateway.domain.levels import default_config
from savelo_gateway.domain.models import CalendarDay, Entitlement, Plan, PlanView, SavingLevel
from savelo_gateway.domain.state_machine import build_calendar


class LevelSchema(BaseModel):
    """Single saving level in the catalog"""

    name: str
    description: str
    min_days: int
    max_days: int
    min_daily_amount: Decimal
    max_daily_amount: Decimal
    penalty_percent: int
    default_days: int
    default_daily_amount: Decimal

    @classmethod
    def from_domain(cls, level: SavingLevel) -> "LevelSchema":
        defaults = default_config(level)
        return cls(
            name=level.name,
            description=level.description,
            min_days=level.min_days,
            max_days=level.max_days,
            min_daily_amount=level.min_daily_amount,
            max_daily_amount=level.max_daily_amount,
            penalty_percent=level.penalty_percent,
            default_days=defaults.total_days,
            default_daily_amount=defaults.daily_amount,
        )


class LevelsResponse(BaseModel):
    """Response for GET /v1/levels"""

    levels: List[LevelSchema]
    grace_period_days: int
    completion_reward_percent: int


class QuoteRequest(BaseModel):
    """Request body for POST /v1/plans/quote; raw form values are accepted"""

    level: str = Field(..., min_length=1, description="Saving level name")
    days: Union[int, str]
    daily_amount: Union[Decimal, str]


class QuoteResponse(BaseModel):
    """Response for POST /v1/plans/quote"""

    valid: bool
    days_valid: bool
    daily_amount_valid: bool
    error: Optional[str] = None
    penalty_stake: Decimal
    total_savings: Decimal
    completion_reward: Decimal
    penalty_stake_display: str
    # Integer token base units, as strings to survive JSON number precision
    penalty_stake_units: str
    completion_reward_units: str


class CreatePlanRequest(QuoteRequest):
    """Request body for POST /v1/plans"""

    wallet: str = Field(..., min_length=1, description="Connected wallet address")


class PaymentRequest(BaseModel):
    """Request body for POST /v1/plans/{plan_id}/payments"""

    wallet: str = Field(..., min_length=1, description="Connected wallet address")


class PlanSchema(BaseModel):
    """Ledger plan record"""

    plan_id: int
    owner: str
    daily_amount: Decimal
    total_days: int
    start_time: int
    current_day: int
    missed_days: int
    is_active: bool
    is_completed: bool
    is_failed: bool
    penalty_stake: Optional[Decimal] = None
    penalty_percent: Optional[int] = None
    stake_remaining: Optional[Decimal] = None

    @classmethod
    def from_domain(cls, plan: Plan) -> "PlanSchema":
        return cls(**plan.__dict__)


class CalendarDaySchema(BaseModel):
    day_number: int
    status: str

    @classmethod
    def from_domain(cls, day: CalendarDay) -> "CalendarDaySchema":
        return cls(day_number=day.day_number, status=day.status)


class PlanViewSchema(BaseModel):
    """Derived plan state returned to clients"""

    plan_id: Optional[int] = None
    state: str
    days_elapsed_since_start: int
    days_until_next_payment_due: int
    is_behind_schedule: bool
    can_pay_today: bool
    progress_percent: float
    completed_days: int
    missed_days: int
    days_remaining: int
    calendar: List[CalendarDaySchema] = []
    plan: Optional[PlanSchema] = None

    @classmethod
    def from_domain(cls, view: PlanView) -> "PlanViewSchema":
        calendar = build_calendar(view.plan, view.can_pay_today) if view.plan else []
        return cls(
            plan_id=view.plan_id,
            state=view.state.value,
            days_elapsed_since_start=view.days_elapsed_since_start,
            days_until_next_payment_due=view.days_until_next_payment_due,
            is_behind_schedule=view.is_behind_schedule,
            can_pay_today=view.can_pay_today,
            progress_percent=round(view.progress_percent, 2),
            completed_days=view.completed_days,
            missed_days=view.missed_days,
            days_remaining=view.days_remaining,
            calendar=[CalendarDaySchema.from_domain(day) for day in calendar],
            plan=PlanSchema.from_domain(view.plan) if view.plan else None,
        )


class CreatePlanResponse(BaseModel):
    """Response for POST /v1/plans"""

    plan_id: int
    tx_hash: str
    plan: PlanViewSchema


class PaymentResponse(BaseModel):
    """Response for POST /v1/plans/{plan_id}/payments"""

    tx_hash: str
    plan: PlanViewSchema


class EntitlementResponse(BaseModel):
    """Response for GET /v1/plans/{plan_id}/entitlement"""

    plan_id: int
    savings_paid: Decimal
    completion_reward: Decimal
    pool_share: Decimal
    stake_returned: Decimal
    total: Decimal

    @classmethod
    def from_domain(cls, plan_id: int, entitlement: Entitlement) -> "EntitlementResponse":
        return cls(
            plan_id=plan_id,
            savings_paid=entitlement.savings_paid,
            completion_reward=entitlement.completion_reward,
            pool_share=entitlement.pool_share,
            stake_returned=entitlement.stake_returned,
            total=entitlement.total,
        )
