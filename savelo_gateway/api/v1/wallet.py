"""POST /v1/wallets/{address}/connect - Resolve the plan to show for a wallet"""

from fastapi import APIRouter, Depends, Request

from savelo_gateway.api.dependencies import get_plan_service, get_request_id
from savelo_gateway.api.errors import to_http_error
from savelo_gateway.api.v1.schemas import PlanViewSchema
from savelo_gateway.domain.exceptions import DomainException
from savelo_gateway.services.plans import PlanService

router = APIRouter()


@router.post("/wallets/{address}/connect", response_model=PlanViewSchema)
async def connect_wallet(
    address: str,
    request: Request,
    service: PlanService = Depends(get_plan_service),
):
    """
    Reconcile the wallet's cached plan ids against the ledger.

    Returns:
        The newest owned, unfinished plan, or an `uninitialized` view
    """
    try:
        view = await service.connect_wallet(address)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    return PlanViewSchema.from_domain(view)
