"""Domain models - pure Python dataclasses representing saving-plan entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PlanState(str, Enum):
    """Lifecycle state of a saving plan as seen by the client"""

    UNINITIALIZED = "uninitialized"
    PENDING_START = "pending_start"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PlanState.COMPLETED, PlanState.FAILED)


@dataclass(frozen=True)
class SavingLevel:
    """Difficulty tier: allowed days/amount band and its penalty percentage"""

    name: str
    description: str
    min_days: int
    max_days: int
    min_daily_amount: Decimal
    max_daily_amount: Decimal
    penalty_percent: int  # 0-100


@dataclass
class PlanConfig:
    """User-chosen instance of a tier, checked against the tier bounds"""

    level: SavingLevel
    total_days: int
    daily_amount: Decimal


@dataclass
class Plan:
    """Plan record as held by the external ledger (observed read-only)"""

    plan_id: int
    owner: str
    daily_amount: Decimal
    total_days: int
    start_time: int  # epoch seconds, 0 = not started
    current_day: int  # days successfully paid
    missed_days: int
    is_active: bool
    is_completed: bool
    is_failed: bool
    penalty_stake: Optional[Decimal] = None
    penalty_percent: Optional[int] = None
    stake_remaining: Optional[Decimal] = None


@dataclass(frozen=True)
class PlanContext:
    """Everything the state machine needs, passed in explicitly"""

    plan_id: Optional[int]
    plan: Optional[Plan]
    now: int  # epoch seconds


@dataclass(frozen=True)
class PlanView:
    """Derived display state for a plan at a point in time"""

    plan_id: Optional[int]
    state: PlanState
    days_elapsed_since_start: int
    days_until_next_payment_due: int
    can_pay_today: bool
    progress_percent: float
    completed_days: int
    missed_days: int
    days_remaining: int
    plan: Optional[Plan] = None

    @property
    def is_behind_schedule(self) -> bool:
        return self.days_until_next_payment_due > 0


@dataclass(frozen=True)
class CalendarDay:
    """Single cell of the streak calendar"""

    day_number: int
    status: str  # "completed" | "missed" | "today" | "upcoming"


@dataclass(frozen=True)
class PlanQuote:
    """Amounts shown to the user before a plan is created"""

    penalty_stake: Decimal
    total_savings: Decimal
    completion_reward: Decimal


@dataclass
class Reconciliation:
    """Outcome of checking a wallet's cached plan ids against the ledger"""

    plan_id: Optional[int]
    plan: Optional[Plan]
    evicted: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class CreatePlanReceipt:
    plan_id: int
    tx_hash: str


@dataclass(frozen=True)
class PaymentReceipt:
    tx_hash: str


@dataclass(frozen=True)
class RewardPool:
    """Community pool snapshot reported by the ledger"""

    balance: Decimal
    total_completed_savings: Decimal


@dataclass(frozen=True)
class Entitlement:
    """What the plan owner can withdraw"""

    savings_paid: Decimal
    completion_reward: Decimal
    pool_share: Decimal
    stake_returned: Decimal

    @property
    def total(self) -> Decimal:
        return self.savings_paid + self.completion_reward + self.pool_share + self.stake_returned
