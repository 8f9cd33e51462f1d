"""Plan orchestration - ties the domain rules to the ledger client and local index"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Iterable, Optional, Set, Tuple

from savelo_gateway.config import settings
from savelo_gateway.domain.exceptions import (
    DomainException,
    MutationInFlightError,
    NetworkError,
    NotActiveError,
    OwnershipMismatchError,
    ValidationError,
)
from savelo_gateway.domain.levels import get_level
from savelo_gateway.domain.models import (
    CreatePlanReceipt,
    Entitlement,
    PaymentReceipt,
    Plan,
    PlanContext,
    PlanView,
    SavingLevel,
)
from savelo_gateway.domain.ownership import ensure_owner, reconcile
from savelo_gateway.domain.penalties import compute_daily_penalty_stake
from savelo_gateway.domain.rewards import compute_entitlement
from savelo_gateway.domain.state_machine import can_pay_today, derive_state, derive_view
from savelo_gateway.domain.validation import validate_plan_config
from savelo_gateway.infrastructure.clients.ledger import LedgerClient
from savelo_gateway.infrastructure.database.plan_index import WalletPlanIndex
from savelo_gateway.infrastructure.observability.metrics import (
    payment_counter,
    reconciliation_eviction_counter,
    record_plan_created,
)

logger = logging.getLogger(__name__)


class MutationTracker:
    """
    Process-wide bookkeeping shared by every request.

    - in-flight keys: at most one pending create/pay per key
    - latest records: newest non-terminal plan record seen per id, the
      fallback view when a post-mutation read fails
    - background re-fetch tasks scheduled after confirmations
    """

    def __init__(self, refetch_delays: Iterable[float] | None = None):
        self.refetch_delays = list(settings.refetch_delays_seconds if refetch_delays is None else refetch_delays)
        self.in_flight: Set[str] = set()
        self.latest: Dict[int, Plan] = {}
        self.tasks: Set[asyncio.Task] = set()

    @asynccontextmanager
    async def single_flight(self, key: str) -> AsyncIterator[None]:
        if key in self.in_flight:
            raise MutationInFlightError(f"A previous request for {key} is still awaiting confirmation")
        self.in_flight.add(key)
        try:
            yield
        finally:
            self.in_flight.discard(key)

    def track(self, task: asyncio.Task) -> None:
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    async def aclose(self) -> None:
        """Cancel outstanding re-fetches on shutdown"""
        for task in list(self.tasks):
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()


class PlanService:
    """Use cases behind the API: connect, view, create, pay, entitlement"""

    def __init__(
        self,
        ledger: LedgerClient,
        index: WalletPlanIndex,
        tracker: MutationTracker,
        clock: Callable[[], float] = time.time,
    ):
        self.ledger = ledger
        self.index = index
        self.tracker = tracker
        self.clock = clock

    def now(self) -> int:
        return int(self.clock())

    def view(self, plan_id: Optional[int], plan: Optional[Plan]) -> PlanView:
        return derive_view(PlanContext(plan_id=plan_id, plan=plan, now=self.now()))

    async def fetch_plan(self, plan_id: int) -> Optional[Plan]:
        plan = await self.ledger.get_plan(plan_id)
        if plan is None or derive_state(plan_id, plan).is_terminal:
            self.tracker.latest.pop(plan_id, None)
        else:
            self.tracker.latest[plan_id] = plan
        return plan

    async def connect_wallet(self, wallet: str) -> PlanView:
        """
        Resolve which plan to show for a freshly connected wallet.

        Falls back to the legacy single-plan key, then walks the cached ids
        against the ledger and drops every id that is missing, foreign or
        finished.
        """
        cached = self.index.migrate_legacy(wallet)
        result = await reconcile(wallet, cached, self.fetch_plan)

        for plan_id in result.evicted:
            self.index.remove_plan(wallet, plan_id)
            self.tracker.latest.pop(plan_id, None)
            reconciliation_eviction_counter.inc()

        return self.view(result.plan_id, result.plan)

    async def get_plan_view(self, wallet: str, plan_id: int) -> Optional[PlanView]:
        """
        Serves the last record seen for the id (kept fresh by the post-mutation
        re-fetches) while the ledger is unreachable.

        Raises:
            OwnershipMismatchError: If the plan belongs to another wallet
            NetworkError: If the ledger is down and nothing is cached
        """
        try:
            plan = await self.fetch_plan(plan_id)
        except NetworkError:
            plan = self.tracker.latest.get(plan_id)
            if plan is None:
                raise
            logger.warning("Ledger unreachable, serving cached plan", extra={"plan_id": plan_id, "wallet": wallet})
        if plan is None:
            return None
        ensure_owner(plan, wallet)
        return self.view(plan_id, plan)

    async def create_plan(
        self,
        wallet: str,
        level: SavingLevel | str | None,
        days: object,
        daily_amount: object,
    ) -> Tuple[CreatePlanReceipt, PlanView]:
        """
        Validate, stake and open a plan, then record it in the wallet's index.

        Raises:
            ValidationError, MutationInFlightError, RejectedError, NetworkError
        """
        if isinstance(level, str):
            level = get_level(level)
        config = validate_plan_config(level, days, daily_amount)
        stake = compute_daily_penalty_stake(config.daily_amount, config.level.penalty_percent)

        async with self.tracker.single_flight(f"create:{wallet.lower()}"):
            start = time.time()
            receipt = await self.ledger.create_plan(
                wallet=wallet,
                daily_amount=config.daily_amount,
                total_days=config.total_days,
                penalty_stake=stake,
                penalty_percent=config.level.penalty_percent,
            )

        self.index.add_plan(wallet, receipt.plan_id)
        record_plan_created(config.level.name, float(config.daily_amount))
        logger.info(
            "Plan created",
            extra={
                "wallet": wallet,
                "plan_id": receipt.plan_id,
                "tx_hash": receipt.tx_hash,
                "duration_ms": (time.time() - start) * 1000,
            },
        )

        plan = await self.refetch_after_mutation(receipt.plan_id)
        return receipt, self.view(receipt.plan_id, plan)

    async def pay_today(self, wallet: str, plan_id: int) -> Tuple[PaymentReceipt, PlanView]:
        """
        Pay the plan's daily amount if the plan is currently payable.

        Raises:
            NotActiveError, OwnershipMismatchError, MutationInFlightError,
            RejectedError, NetworkError
        """
        try:
            async with self.tracker.single_flight(f"plan:{plan_id}"):
                plan = await self.fetch_plan(plan_id)
                if plan is None:
                    raise NotActiveError(f"Plan {plan_id} does not exist")
                ensure_owner(plan, wallet)

                if not can_pay_today(derive_state(plan_id, plan), plan):
                    raise NotActiveError(f"Plan {plan_id} is not accepting payments")

                receipt = await self.ledger.pay_today(wallet, plan_id, plan.daily_amount)
        except DomainException as e:
            payment_counter.labels(outcome=_payment_outcome(e)).inc()
            raise

        payment_counter.labels(outcome="confirmed").inc()
        logger.info("Daily payment confirmed", extra={"wallet": wallet, "plan_id": plan_id, "tx_hash": receipt.tx_hash})

        refreshed = await self.refetch_after_mutation(plan_id)
        return receipt, self.view(plan_id, refreshed or plan)

    async def get_entitlement(self, wallet: str, plan_id: int) -> Optional[Entitlement]:
        plan = await self.fetch_plan(plan_id)
        if plan is None:
            return None
        ensure_owner(plan, wallet)
        pool = await self.ledger.get_reward_pool()
        return compute_entitlement(plan, pool)

    async def refetch_after_mutation(self, plan_id: int) -> Optional[Plan]:
        """
        Fetch now, then again after each configured delay in the background.

        The mutation is already confirmed, so a failed read must not fail
        the caller: the last record seen for the id is returned instead
        (None for a plan never seen, which renders as pending start).
        """
        try:
            plan = await self.fetch_plan(plan_id)
        except NetworkError as e:
            logger.warning(
                "Post-mutation plan read failed, serving last known record",
                extra={"plan_id": plan_id, "error": str(e)},
            )
            plan = self.tracker.latest.get(plan_id)

        for delay in self.tracker.refetch_delays:
            self.tracker.track(asyncio.create_task(self._delayed_refetch(plan_id, delay)))
        return plan

    async def _delayed_refetch(self, plan_id: int, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.fetch_plan(plan_id)
        except NetworkError as e:
            # Best effort; the next read will try again
            logger.warning("Delayed plan re-fetch failed", extra={"plan_id": plan_id, "error": str(e)})


def _payment_outcome(error: DomainException) -> str:
    if isinstance(error, MutationInFlightError):
        return "in_flight"
    if isinstance(error, NotActiveError):
        return "not_active"
    if isinstance(error, NetworkError):
        return "network_error"
    if isinstance(error, ValidationError):
        return "invalid"
    if isinstance(error, OwnershipMismatchError):
        return "not_owner"
    return "rejected"
