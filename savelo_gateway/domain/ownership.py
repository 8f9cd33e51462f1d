"""Ownership guard and reconciliation of the local plan index against the ledger"""

import logging
from typing import Awaitable, Callable, Optional, Sequence
from savelo_gateway.domain.models import Plan, Reconciliation
from savelo_gateway.domain.exceptions import OwnershipMismatchError
from savelo_gateway.domain.state_machine import derive_state

logger = logging.getLogger(__name__)

FetchPlan = Callable[[int], Awaitable[Optional[Plan]]]


def same_owner(owner: Optional[str], wallet: Optional[str]) -> bool:
    """Case-insensitive address comparison; blank addresses never match"""
    if not owner or not wallet:
        return False
    return owner.strip().lower() == wallet.strip().lower()


def ensure_owner(plan: Plan, wallet: str) -> Plan:
    """
    Raises:
        OwnershipMismatchError: If the plan belongs to another wallet
    """
    if not same_owner(plan.owner, wallet):
        raise OwnershipMismatchError(plan.plan_id, plan.owner, wallet)
    return plan


async def reconcile(wallet: str, cached_ids: Sequence[int], fetch_plan: FetchPlan) -> Reconciliation:
    """
    Pick the plan to show for a wallet from its cached ids (most recent first).

    Each candidate is fetched from the ledger. Ids that no longer exist, belong
    to another wallet, or point at a finished plan are collected in `evicted`
    and the next id is tried. The caller applies evictions to its index.
    """
    evicted = []
    for plan_id in cached_ids:
        plan = await fetch_plan(plan_id)
        if plan is None:
            logger.info("Cached plan not found on ledger", extra={"plan_id": plan_id, "wallet": wallet})
            evicted.append(plan_id)
            continue

        try:
            ensure_owner(plan, wallet)
        except OwnershipMismatchError as e:
            logger.warning(str(e), extra={"plan_id": plan_id, "wallet": wallet})
            evicted.append(plan_id)
            continue

        if derive_state(plan_id, plan).is_terminal:
            logger.info("Evicting finished plan", extra={"plan_id": plan_id, "wallet": wallet})
            evicted.append(plan_id)
            continue

        return Reconciliation(plan_id=plan_id, plan=plan, evicted=evicted)

    return Reconciliation(plan_id=None, plan=None, evicted=evicted)
