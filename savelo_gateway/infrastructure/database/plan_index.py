"""Per-wallet cache of created plan ids, most recent first"""

import json
import logging
from typing import List, Optional
from savelo_gateway.infrastructure.database.repositories import LocalStateRepository

logger = logging.getLogger(__name__)

LEGACY_PLAN_KEY = "savingPlanId"


def wallet_key(address: str) -> str:
    return f"walletPlans_{address.strip().lower()}"


def _parse_id(value: object) -> Optional[int]:
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class WalletPlanIndex:
    """
    Local hint for re-locating a wallet's plans across sessions.

    Not authoritative: entries are checked against the ledger on every
    wallet connect and evicted when they turn out to be wrong or finished.
    """

    def __init__(self, repo: LocalStateRepository):
        self.repo = repo

    def get_plans(self, address: str) -> List[int]:
        """Read the cached list, tolerating a bare id or garbage"""
        raw = self.repo.get(wallet_key(address))
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            single = _parse_id(raw)
            return [single] if single is not None else []

        if isinstance(parsed, list):
            return [plan_id for plan_id in (_parse_id(item) for item in parsed) if plan_id is not None]
        single = _parse_id(parsed)
        return [single] if single is not None else []

    def save_plans(self, address: str, plan_ids: List[int]) -> None:
        unique = list(dict.fromkeys(plan_ids))
        self.repo.set(wallet_key(address), json.dumps([str(plan_id) for plan_id in unique]))
        self.repo.commit()

    def add_plan(self, address: str, plan_id: int) -> List[int]:
        """Move plan_id to the front of the wallet's list and mirror it in the legacy key"""
        plans = [plan_id] + [p for p in self.get_plans(address) if p != plan_id]
        self.save_plans(address, plans)
        self.repo.set(LEGACY_PLAN_KEY, str(plan_id))
        self.repo.commit()
        return plans

    def remove_plan(self, address: str, plan_id: int) -> List[int]:
        """Drop plan_id; returns what is left. The legacy key follows only when it pointed at plan_id."""
        plans = [p for p in self.get_plans(address) if p != plan_id]
        if plans:
            self.save_plans(address, plans)
        else:
            self.repo.delete(wallet_key(address))

        # The legacy key is shared by all wallets; only touch it if it mirrors this id
        legacy = self.repo.get(LEGACY_PLAN_KEY)
        if legacy is not None and _parse_id(legacy) == plan_id:
            if plans:
                self.repo.set(LEGACY_PLAN_KEY, str(plans[0]))
            else:
                self.repo.delete(LEGACY_PLAN_KEY)
        self.repo.commit()
        return plans

    def migrate_legacy(self, address: str) -> List[int]:
        """
        Adopt the pre-wallet single plan key for a wallet with no list yet.

        Returns the wallet's list after migration (empty if nothing to adopt).
        """
        plans = self.get_plans(address)
        if plans:
            return plans
        legacy = self.repo.get(LEGACY_PLAN_KEY)
        plan_id = _parse_id(legacy) if legacy else None
        if plan_id is None:
            return []
        logger.info("Migrated legacy plan to wallet storage", extra={"plan_id": plan_id, "wallet": address})
        return self.add_plan(address, plan_id)
