"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from savelo_gateway.infrastructure.clients.ledger import LedgerClient
from savelo_gateway.infrastructure.database.plan_index import WalletPlanIndex
from savelo_gateway.infrastructure.database.repositories import LocalStateRepository
from savelo_gateway.infrastructure.database.session import get_db
from savelo_gateway.services.plans import MutationTracker, PlanService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_client() -> LedgerClient:
    """Provide Ledger API client instance"""
    return LedgerClient()


def get_tracker(request: Request) -> MutationTracker:
    """Process-wide in-flight/refetch bookkeeping"""
    return request.app.state.tracker


def get_plan_service(
    db: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger_client),
    tracker: MutationTracker = Depends(get_tracker),
) -> PlanService:
    """Provide a plan service bound to this request's database session"""
    return PlanService(ledger, WalletPlanIndex(LocalStateRepository(db)), tracker)
