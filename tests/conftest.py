"""Pytest fixtures for testing"""

import time
from decimal import Decimal
from typing import Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from mock_ledger.main import LedgerState, create_ledger_app
from savelo_gateway.api.dependencies import get_ledger_client
from savelo_gateway.api.main import create_app
from savelo_gateway.domain.models import Plan
from savelo_gateway.infrastructure.clients.ledger import LedgerClient
from savelo_gateway.infrastructure.database.models import Base
from savelo_gateway.infrastructure.database.plan_index import WalletPlanIndex
from savelo_gateway.infrastructure.database.repositories import LocalStateRepository
from savelo_gateway.infrastructure.database.session import get_db
from savelo_gateway.services.plans import MutationTracker, PlanService

WALLET_A = "0xAbC0000000000000000000000000000000000001"
WALLET_B = "0xbEe0000000000000000000000000000000000002"
DAY = 86_400

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Manually advanced epoch clock shared by the mock ledger and the service"""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, days: float = 0, seconds: float = 0) -> None:
        self.now += days * DAY + seconds


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(float(int(time.time())))


@pytest.fixture
def ledger_state(clock: FakeClock) -> LedgerState:
    """In-memory ledger sharing the test clock"""
    return LedgerState(clock=clock, decline_wallets=["0xdec1ined"])


@pytest.fixture
def ledger_client(ledger_state: LedgerState) -> LedgerClient:
    """Ledger client talking to the mock ledger in-process"""
    transport = httpx.ASGITransport(app=create_ledger_app(ledger_state))
    return LedgerClient(base_url="http://ledger.test", transport=transport)


@pytest.fixture
def index(db: Session) -> WalletPlanIndex:
    return WalletPlanIndex(LocalStateRepository(db))


@pytest.fixture
def tracker() -> MutationTracker:
    """No delayed re-fetches so tests never leave tasks behind"""
    return MutationTracker(refetch_delays=[])


@pytest.fixture
def service(ledger_client: LedgerClient, index: WalletPlanIndex, tracker: MutationTracker, clock: FakeClock) -> PlanService:
    return PlanService(ledger_client, index, tracker, clock=clock)


@pytest.fixture
def client(db: Session, ledger_client: LedgerClient, tracker: MutationTracker) -> TestClient:
    """Create FastAPI test client with test database and in-process ledger"""
    app = create_app(tracker)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_client] = lambda: ledger_client
    return TestClient(app)


@pytest.fixture
def make_plan() -> Callable[..., Plan]:
    """Build a ledger Plan record with sensible defaults"""

    def _make_plan(**overrides) -> Plan:
        fields = dict(
            plan_id=1,
            owner=WALLET_A,
            daily_amount=Decimal("5"),
            total_days=10,
            start_time=1_700_000_000,
            current_day=0,
            missed_days=0,
            is_active=True,
            is_completed=False,
            is_failed=False,
        )
        fields.update(overrides)
        return Plan(**fields)

    return _make_plan
