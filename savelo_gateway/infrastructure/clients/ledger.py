"""Ledger HTTP client - plan records, plan creation and daily payments"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from savelo_gateway.config import settings
from savelo_gateway.domain.exceptions import NetworkError, NotActiveError, RejectedError, ValidationError
from savelo_gateway.domain.models import CreatePlanReceipt, PaymentReceipt, Plan, RewardPool
from savelo_gateway.infrastructure.observability.metrics import ledger_failure_counter, ledger_latency_histogram
from savelo_gateway.utils.units import format_units, parse_units

logger = logging.getLogger(__name__)


def parse_plan(data: Dict[str, Any]) -> Plan:
    """
    Build a Plan from the ledger's JSON.

    Owner may arrive as `owner` or `user`. Amounts may arrive as decimal
    strings (`daily_amount`) or as integer base units (`daily_amount_units`).
    """

    def optional_decimal(key: str) -> Optional[Decimal]:
        value = data.get(key)
        if value is not None:
            return Decimal(str(value))
        units = data.get(f"{key}_units")
        if units is not None:
            return Decimal(format_units(int(units), settings.token_decimals))
        return None

    daily_amount = optional_decimal("daily_amount")
    if daily_amount is None:
        raise KeyError("daily_amount")

    return Plan(
        plan_id=int(data.get("plan_id", data.get("id"))),
        owner=str(data.get("owner") or data.get("user") or ""),
        daily_amount=daily_amount,
        total_days=int(data["total_days"]),
        start_time=int(data.get("start_time") or 0),
        current_day=int(data.get("current_day") or 0),
        missed_days=int(data.get("missed_days") or 0),
        is_active=bool(data.get("is_active", False)),
        is_completed=bool(data.get("is_completed", False)),
        is_failed=bool(data.get("is_failed", False)),
        penalty_stake=optional_decimal("penalty_stake"),
        penalty_percent=int(data["penalty_percent"]) if data.get("penalty_percent") is not None else None,
        stake_remaining=optional_decimal("stake_remaining"),
    )


def _raise_for_mutation(response: httpx.Response, operation: str) -> None:
    """Map ledger status codes on create/pay to domain errors"""
    if response.is_success:
        return

    ledger_failure_counter.labels(operation=operation).inc()
    try:
        detail = response.json().get("detail", response.text)
    except (ValueError, AttributeError):
        detail = response.text

    status = response.status_code
    if status in (400, 422):
        raise ValidationError(f"Ledger rejected input: {detail}")
    if status == 403:
        raise RejectedError("Transaction was declined in the wallet")
    if status in (404, 409):
        raise NotActiveError(f"Plan is not payable: {detail}")
    raise NetworkError(f"Ledger error: {status}")


class LedgerClient:
    """Client for the external ledger that holds balances and plan records"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ledger_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.ledger_max_retries
        self.backoff_base = settings.ledger_backoff_base
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _get_with_retry(self, path: str, operation: str) -> Optional[httpx.Response]:
        """
        GET with exponential backoff on transport errors and 5xx.

        Returns None on 404. Reads are safe to repeat; mutations never go
        through here.

        Raises:
            NetworkError: After the final failed attempt
        """
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    with ledger_latency_histogram.labels(operation=operation).time():
                        response = await client.get(path)
                    if response.status_code == 404:
                        return None
                    response.raise_for_status()
                    return response

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    ledger_failure_counter.labels(operation=operation).inc()
                    retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500

                    if not retryable or attempt >= self.max_retries:
                        raise NetworkError(f"Ledger unavailable during {operation}: {e}") from e

                    # Exponential backoff: base, 2*base, 4*base, ...
                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    logger.warning(
                        "Ledger read failed, retrying",
                        extra={"operation": operation, "attempt": attempt, "backoff": backoff},
                    )
                    await asyncio.sleep(backoff)

    async def get_plan(self, plan_id: int) -> Optional[Plan]:
        """
        Fetch a plan record, or None if the id does not exist.

        Raises:
            NetworkError: On timeout, server errors, or malformed data
        """
        response = await self._get_with_retry(f"/plans/{plan_id}", "get_plan")
        if response is None:
            return None
        try:
            return parse_plan(response.json())
        except (KeyError, ValueError, TypeError) as e:
            raise NetworkError(f"Invalid plan data from ledger: {e}") from e

    async def get_reward_pool(self) -> RewardPool:
        response = await self._get_with_retry("/reward-pool", "get_reward_pool")
        if response is None:
            return RewardPool(balance=Decimal(0), total_completed_savings=Decimal(0))
        try:
            data = response.json()
            return RewardPool(
                balance=Decimal(str(data["balance"])),
                total_completed_savings=Decimal(str(data["total_completed_savings"])),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise NetworkError(f"Invalid reward pool data from ledger: {e}") from e

    async def create_plan(
        self,
        wallet: str,
        daily_amount: Decimal,
        total_days: int,
        penalty_stake: Decimal,
        penalty_percent: int,
    ) -> CreatePlanReceipt:
        """
        Ask the ledger to open a plan and take the stake.

        Raises:
            ValidationError, RejectedError, NetworkError
        """
        payload = {
            "wallet": wallet,
            "daily_amount": str(daily_amount),
            "total_days": total_days,
            "penalty_stake": str(penalty_stake),
            "penalty_percent": penalty_percent,
            "daily_amount_units": str(parse_units(daily_amount, settings.token_decimals)),
            "penalty_stake_units": str(parse_units(penalty_stake, settings.token_decimals)),
        }
        data = await self._post("/plans", payload, "create_plan")
        try:
            return CreatePlanReceipt(plan_id=int(data["plan_id"]), tx_hash=str(data["tx_hash"]))
        except (KeyError, ValueError, TypeError) as e:
            raise NetworkError(f"Invalid create receipt from ledger: {e}") from e

    async def pay_today(self, wallet: str, plan_id: int, amount: Decimal) -> PaymentReceipt:
        """
        Submit today's payment for a plan.

        Raises:
            ValidationError, RejectedError, NotActiveError, NetworkError
        """
        payload = {
            "wallet": wallet,
            "amount": str(amount),
            "amount_units": str(parse_units(amount, settings.token_decimals)),
        }
        data = await self._post(f"/plans/{plan_id}/payments", payload, "pay_today")
        try:
            return PaymentReceipt(tx_hash=str(data["tx_hash"]))
        except (KeyError, TypeError) as e:
            raise NetworkError(f"Invalid payment receipt from ledger: {e}") from e

    async def _post(self, path: str, payload: Dict[str, Any], operation: str) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                with ledger_latency_histogram.labels(operation=operation).time():
                    response = await client.post(path, json=payload)
            except httpx.TimeoutException as e:
                ledger_failure_counter.labels(operation=operation).inc()
                raise NetworkError(f"Ledger timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                ledger_failure_counter.labels(operation=operation).inc()
                raise NetworkError(f"Ledger unreachable: {e}") from e

        _raise_for_mutation(response, operation)
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid response from ledger: {e}") from e
