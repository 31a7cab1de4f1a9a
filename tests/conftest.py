"""
Pytest configuration and fixtures for the club dashboard tests.

This module provides:
- A fake monotonic clock for TTL tests
- In-memory SQLite database fixtures
- An in-memory dashboard data source
- Factory helpers for members, events and transactions
- Service and repository fixtures
- A FastAPI test client with its own database and AppContext
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest
import pytz
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from clubdash.main import app
from clubdash.app_context import AppContext, reset_app_context, set_app_context
from clubdash.config.settings import Settings, reset_settings
from clubdash.repositories.sqlalchemy.database import (
    Base,
    configure_database,
    get_session_factory,
    reset_database,
)
# Import ORM models to register them with Base before creating tables
from clubdash.repositories.sqlalchemy import orm_models  # noqa: F401
from clubdash.repositories.sqlalchemy import (
    SqlAlchemyMemberRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyTransactionRepository,
)
from clubdash.services import (
    LedgerService,
    RunningBalanceEngine,
    TTLCacheStore,
    TransactionCreate,
    TransactionPart,
)
from clubdash.domain.models import (
    Event,
    EventStatus,
    FinancialTransaction,
    LedgerEntry,
    Member,
    MemberStatus,
    TransactionKind,
)

KL_TZ = pytz.timezone("Asia/Kuala_Lumpur")

# Small tier delays so scheduling tests finish quickly
FAST_TIER_DELAYS = {"HIGH": 0.02, "NORMAL": 0.05, "LOW": 0.1}


# =============================================================================
# CLOCK HELPERS
# =============================================================================


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def local_datetime(year: int, month: int, day: int, hour: int = 10, minute: int = 0) -> datetime:
    """Create a localized datetime in the club's timezone."""
    return KL_TZ.localize(datetime(year, month, day, hour, minute))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return local_datetime(2024, 6, 15, 14, 30)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def member_repo(test_session) -> SqlAlchemyMemberRepository:
    return SqlAlchemyMemberRepository(test_session)


@pytest.fixture
def event_repo(test_session) -> SqlAlchemyEventRepository:
    return SqlAlchemyEventRepository(test_session)


@pytest.fixture
def transaction_repo(test_session) -> SqlAlchemyTransactionRepository:
    return SqlAlchemyTransactionRepository(test_session)


# =============================================================================
# DASHBOARD DATA SOURCE
# =============================================================================


class InMemoryDashboardSource:
    """Dashboard source backed by plain lists, counting reads."""

    def __init__(
        self,
        members: Optional[list[Member]] = None,
        events: Optional[list[Event]] = None,
    ):
        self.members = list(members or [])
        self.events = list(events or [])
        self.member_reads = 0
        self.event_reads = 0

    def list_members(self) -> list[Member]:
        self.member_reads += 1
        return list(self.members)

    def list_events(self) -> list[Event]:
        self.event_reads += 1
        return list(self.events)


class FailingDashboardSource:
    """Dashboard source whose backing store is unreachable."""

    def list_members(self) -> list[Member]:
        raise ConnectionError("Member store unavailable")

    def list_events(self) -> list[Event]:
        raise ConnectionError("Event store unavailable")


@pytest.fixture
def dashboard_source() -> InMemoryDashboardSource:
    return InMemoryDashboardSource()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def cache(fake_clock) -> TTLCacheStore:
    """TTL store driven by the fake clock."""
    return TTLCacheStore(clock=fake_clock)


@pytest.fixture
def balance_engine() -> RunningBalanceEngine:
    return RunningBalanceEngine()


@pytest.fixture
def ledger_service(transaction_repo, balance_engine, cache) -> LedgerService:
    """Provide test LedgerService."""
    return LedgerService(
        transaction_repo=transaction_repo,
        balance_engine=balance_engine,
        cache=cache,
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


def make_member(
    name: str = "Member",
    status: MemberStatus = MemberStatus.ACTIVE,
    birth_date: Optional[date] = None,
    industries: Optional[list[str]] = None,
    interests: Optional[list[str]] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Member:
    return Member(
        member_id=str(uuid.uuid4()),
        name=name,
        status=status,
        category=category,
        level=level,
        birth_date=birth_date,
        industries=industries or [],
        interests=interests or [],
        created_at=created_at,
    )


def make_event(
    name: str,
    start_date: datetime,
    status: EventStatus = EventStatus.PUBLISHED,
) -> Event:
    return Event(event_id=str(uuid.uuid4()), name=name, start_date=start_date, status=status)


def income(entry_id: str, amount, **kwargs) -> LedgerEntry:
    return LedgerEntry(entry_id=entry_id, kind=TransactionKind.INCOME, amount=amount, **kwargs)


def expense(entry_id: str, amount, **kwargs) -> LedgerEntry:
    return LedgerEntry(entry_id=entry_id, kind=TransactionKind.EXPENSE, amount=amount, **kwargs)


@pytest.fixture
def transaction_factory(ledger_service) -> Callable[..., FinancialTransaction]:
    """Factory for recording test transactions."""

    def _record(
        account_id: str = "acc-1",
        kind: TransactionKind = TransactionKind.INCOME,
        amount: Decimal = Decimal("100"),
        txn_date: Optional[date] = None,
        description: Optional[str] = None,
        parts: Optional[list[Decimal]] = None,
    ) -> FinancialTransaction:
        return ledger_service.record_transaction(
            TransactionCreate(
                account_id=account_id,
                kind=kind,
                amount=amount,
                txn_date=txn_date,
                description=description,
                parts=[TransactionPart(amount=p) for p in (parts or [])],
            )
        )

    return _record


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file with fast tiers."""
    return Settings(data_dir=tmp_path, tier_delays=FAST_TIER_DELAYS)


@pytest.fixture
def client(api_settings) -> TestClient:
    """
    Provide FastAPI test client with its own database and AppContext.

    A file database is used because dashboard producers read from worker
    threads, each with its own connection.
    """
    configure_database(api_settings)
    set_app_context(AppContext(api_settings))
    with TestClient(app) as c:
        yield c
    reset_app_context()
    reset_database()
    reset_settings()


@pytest.fixture
def api_session(client) -> Session:
    """Session on the test client's database, for seeding members and events."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def naive_balances(entries: list[LedgerEntry], opening: Decimal) -> dict[str, Decimal]:
    """Reference running balances: plain oldest-first pass over non-part entries."""
    result = {}
    running = opening
    for entry in reversed(entries):
        if entry.is_virtual or entry.parent_id:
            continue
        running += entry.amount if entry.kind == TransactionKind.INCOME else -entry.amount
        result[entry.entry_id] = running
    return result
