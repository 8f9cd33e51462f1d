"""Plan endpoints - quote, create, view, pay today, entitlement"""

import time
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from savelo_gateway.api.dependencies import get_plan_service, get_request_id
from savelo_gateway.api.errors import to_http_error
from savelo_gateway.api.v1.schemas import (
    CreatePlanRequest,
    CreatePlanResponse,
    EntitlementResponse,
    PaymentRequest,
    PaymentResponse,
    PlanViewSchema,
    QuoteRequest,
    QuoteResponse,
)
from savelo_gateway.config import settings
from savelo_gateway.domain.exceptions import DomainException, ValidationError
from savelo_gateway.domain.levels import get_level
from savelo_gateway.domain.penalties import (
    compute_completion_reward_units,
    compute_daily_penalty_stake,
    quote_plan as quote_plan_config,
)
from savelo_gateway.domain.validation import is_valid_daily_amount, is_valid_days, validate_plan_config
from savelo_gateway.infrastructure.observability.logging import log_plan_event
from savelo_gateway.services.plans import PlanService
from savelo_gateway.utils.units import format_usd_with_celo, parse_units

router = APIRouter()


@router.post("/plans/quote", response_model=QuoteResponse)
def quote_plan(request_body: QuoteRequest):
    """
    Re-check form input against the level and price it.

    Always answers 200: invalid input is reported through `valid`/`error`
    and the amounts degrade to 0 instead of failing.
    """
    level = get_level(request_body.level)
    stake = compute_daily_penalty_stake(request_body.daily_amount, level.penalty_percent if level else 0)
    total_savings = completion_reward = Decimal("0.00")
    error = None

    try:
        config = validate_plan_config(level, request_body.days, request_body.daily_amount)
    except ValidationError as e:
        error = str(e)
    else:
        quote = quote_plan_config(config)
        total_savings, completion_reward = quote.total_savings, quote.completion_reward

    return QuoteResponse(
        valid=error is None,
        days_valid=is_valid_days(level, request_body.days),
        daily_amount_valid=is_valid_daily_amount(level, request_body.daily_amount),
        error=error,
        penalty_stake=stake,
        total_savings=total_savings,
        completion_reward=completion_reward,
        penalty_stake_display=format_usd_with_celo(stake, settings.celo_usd_rate),
        penalty_stake_units=str(parse_units(stake, settings.token_decimals)),
        completion_reward_units=str(
            compute_completion_reward_units(parse_units(total_savings, settings.token_decimals))
        ),
    )


@router.post("/plans", response_model=CreatePlanResponse)
async def create_plan(
    request_body: CreatePlanRequest,
    request: Request,
    service: PlanService = Depends(get_plan_service),
):
    """
    Create a plan and stake the penalty deposit.

    Flow:
    1. Validate days/amount against the level
    2. Compute the penalty stake from the level percentage
    3. Submit to the ledger (one pending creation per wallet)
    4. Record the new id at the front of the wallet's index
    5. Re-fetch the record and return its derived view
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        receipt, view = await service.create_plan(
            request_body.wallet,
            request_body.level,
            request_body.days,
            request_body.daily_amount,
        )
    except DomainException as e:
        raise to_http_error(e, request_id)

    log_plan_event(
        "plan_created",
        request_body.wallet,
        receipt.plan_id,
        (time.time() - start_time) * 1000,
        request_id=request_id,
        tx_hash=receipt.tx_hash,
    )
    return CreatePlanResponse(plan_id=receipt.plan_id, tx_hash=receipt.tx_hash, plan=PlanViewSchema.from_domain(view))


@router.get("/plans/{plan_id}", response_model=PlanViewSchema)
async def get_plan(
    plan_id: int,
    request: Request,
    wallet: str = Query(..., min_length=1, description="Connected wallet address"),
    service: PlanService = Depends(get_plan_service),
):
    """
    Retrieve a plan's derived state and streak calendar.

    Plans owned by another wallet are reported as not found.
    """
    try:
        view = await service.get_plan_view(wallet, plan_id)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    if view is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return PlanViewSchema.from_domain(view)


@router.post("/plans/{plan_id}/payments", response_model=PaymentResponse)
async def pay_today(
    plan_id: int,
    request_body: PaymentRequest,
    request: Request,
    service: PlanService = Depends(get_plan_service),
):
    """Pay today's saving for an active plan"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        receipt, view = await service.pay_today(request_body.wallet, plan_id)
    except DomainException as e:
        raise to_http_error(e, request_id)

    log_plan_event(
        "daily_payment",
        request_body.wallet,
        plan_id,
        (time.time() - start_time) * 1000,
        request_id=request_id,
        tx_hash=receipt.tx_hash,
        current_day=view.completed_days,
    )
    return PaymentResponse(tx_hash=receipt.tx_hash, plan=PlanViewSchema.from_domain(view))


@router.get("/plans/{plan_id}/entitlement", response_model=EntitlementResponse)
async def get_entitlement(
    plan_id: int,
    request: Request,
    wallet: str = Query(..., min_length=1, description="Connected wallet address"),
    service: PlanService = Depends(get_plan_service),
):
    """What the owner can withdraw: savings, bonus, pool share and stake"""
    try:
        entitlement = await service.get_entitlement(wallet, plan_id)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    if entitlement is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return EntitlementResponse.from_domain(plan_id, entitlement)
