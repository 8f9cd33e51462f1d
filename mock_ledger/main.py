"""
Mock ledger for local development and tests.

Holds plan records in memory and applies the rules a real ledger enforces:
missed days are counted from elapsed time, the first 2 missed days are a
grace period, every further missed day forfeits `penalty_percent` of the
daily amount from the stake into the community pool, and a plan fails once
its stake is gone.

    uvicorn mock_ledger.main:app --port 8002
"""

import os
import secrets
import time
from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

GRACE_PERIOD_DAYS = 2
SECONDS_PER_DAY = 86_400


class CreatePlanBody(BaseModel):
    wallet: str
    daily_amount: Decimal
    total_days: int
    penalty_stake: Decimal
    penalty_percent: int


class PaymentBody(BaseModel):
    wallet: str
    amount: Decimal


class LedgerState:
    """In-memory plan book with an injectable clock"""

    def __init__(self, clock: Callable[[], float] = time.time, decline_wallets: Iterable[str] = ()):
        self.clock = clock
        self.decline_wallets = {w.lower() for w in decline_wallets}
        self.plans: Dict[int, dict] = {}
        self.next_id = 1
        self.pool_balance = Decimal(0)
        self.total_completed_savings = Decimal(0)

    def now(self) -> int:
        return int(self.clock())

    def add_plan(
        self,
        owner: str,
        daily_amount: Decimal,
        total_days: int,
        penalty_stake: Decimal = Decimal(0),
        penalty_percent: int = 10,
        plan_id: Optional[int] = None,
        **overrides,
    ) -> dict:
        """Open a plan starting now; `overrides` let tests seed any field"""
        if plan_id is None:
            plan_id = self.next_id
        self.next_id = max(self.next_id, plan_id + 1)

        plan = {
            "plan_id": plan_id,
            "user": owner,
            "daily_amount": Decimal(daily_amount),
            "total_days": total_days,
            "start_time": self.now(),
            "current_day": 0,
            "missed_days": 0,
            "is_active": True,
            "is_completed": False,
            "is_failed": False,
            "penalty_stake": Decimal(penalty_stake),
            "penalty_percent": penalty_percent,
            "stake_remaining": Decimal(penalty_stake),
            "forfeited": Decimal(0),
        }
        plan.update(overrides)
        self.plans[plan_id] = plan
        return plan

    def refresh(self, plan: dict) -> None:
        """Recompute missed days and apply penalties for an active plan"""
        if not plan["is_active"] or plan["start_time"] <= 0:
            return

        elapsed = max(0, (self.now() - plan["start_time"]) // SECONDS_PER_DAY)
        plan["missed_days"] = max(0, elapsed - plan["current_day"])

        penalised_days = max(0, plan["missed_days"] - GRACE_PERIOD_DAYS)
        per_day = plan["daily_amount"] * plan["penalty_percent"] / 100
        forfeited = min(plan["penalty_stake"], per_day * penalised_days)

        self.pool_balance += forfeited - plan["forfeited"]
        plan["forfeited"] = forfeited
        plan["stake_remaining"] = plan["penalty_stake"] - forfeited

        if penalised_days > 0 and plan["stake_remaining"] <= 0:
            plan["is_active"] = False
            plan["is_failed"] = True

    def pay(self, plan: dict) -> None:
        plan["current_day"] += 1
        if plan["current_day"] >= plan["total_days"]:
            plan["is_active"] = False
            plan["is_completed"] = True
            self.total_completed_savings += plan["daily_amount"] * plan["total_days"]


def serialize(plan: dict) -> dict:
    return {
        key: (str(value) if isinstance(value, Decimal) else value)
        for key, value in plan.items()
        if key != "forfeited"
    }


def create_ledger_app(state: Optional[LedgerState] = None) -> FastAPI:
    app = FastAPI(title="Mock Ledger Server", version="1.0.0")
    if state is None:
        declined = os.environ.get("MOCK_DECLINE_WALLETS", "")
        state = LedgerState(decline_wallets=[w for w in declined.split(",") if w])
    app.state.ledger = state

    def tx_hash() -> str:
        return "0x" + secrets.token_hex(32)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/plans/{plan_id}")
    def get_plan(plan_id: int):
        plan = state.plans.get(plan_id)
        if plan is None:
            raise HTTPException(status_code=404, detail="plan not found")
        state.refresh(plan)
        return serialize(plan)

    @app.post("/plans")
    def create_plan(body: CreatePlanBody):
        if body.wallet.lower() in state.decline_wallets:
            raise HTTPException(status_code=403, detail="user rejected the request")
        if body.daily_amount <= 0 or body.total_days <= 0 or body.penalty_stake < 0:
            raise HTTPException(status_code=422, detail="invalid plan parameters")
        plan = state.add_plan(
            owner=body.wallet,
            daily_amount=body.daily_amount,
            total_days=body.total_days,
            penalty_stake=body.penalty_stake,
            penalty_percent=body.penalty_percent,
        )
        return {"plan_id": plan["plan_id"], "tx_hash": tx_hash()}

    @app.post("/plans/{plan_id}/payments")
    def pay_today(plan_id: int, body: PaymentBody):
        plan = state.plans.get(plan_id)
        if plan is None:
            raise HTTPException(status_code=404, detail="plan not found")
        if body.wallet.lower() in state.decline_wallets:
            raise HTTPException(status_code=403, detail="user rejected the request")
        if body.wallet.lower() != plan["user"].lower():
            raise HTTPException(status_code=422, detail="wallet does not own this plan")

        state.refresh(plan)
        if not plan["is_active"]:
            raise HTTPException(status_code=409, detail="plan is not active")
        if body.amount != plan["daily_amount"]:
            raise HTTPException(status_code=422, detail="amount must equal the daily amount")

        state.pay(plan)
        return {"tx_hash": tx_hash()}

    @app.get("/reward-pool")
    def reward_pool():
        return {
            "balance": str(state.pool_balance),
            "total_completed_savings": str(state.total_completed_savings),
        }

    return app


app = create_ledger_app()
