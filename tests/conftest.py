"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from runway_guard.api.main import create_app
from runway_guard.infrastructure.database.models import Base
from runway_guard.infrastructure.database.session import get_db
from runway_guard.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed evaluation date for domain tests
TODAY = date(2025, 6, 15)


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
def app(db: Session):
    """FastAPI app bound to the test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for signed transactions: negative amounts are debits"""
    counter = {"n": 0}

    def _make(
        on: date,
        amount: float | str,
        vendor: str | None = "Vendor",
        is_recurring: bool = False,
        is_payroll: bool | None = None,
    ) -> Transaction:
        counter["n"] += 1
        value = Decimal(str(amount))
        return Transaction(
            id=f"txn_{counter['n']}",
            date=on,
            amount=value,
            type="credit" if value >= 0 else "debit",
            vendor_normalized=vendor,
            is_recurring=is_recurring,
            is_payroll=is_payroll,
        )

    return _make


@pytest.fixture
def steady_quarter(make_txn) -> List[Transaction]:
    """
    Three equal months ending TODAY: $90,000 of debits and $20,000 of credits.

    Each trailing month holds six $5,000 debits to distinct vendors, so there
    are no spikes, no acceleration and no large transactions; only runway
    varies with the cash balance.
    """
    transactions = []
    for month_day, credit in ((date(2025, 3, 20), 10000), (date(2025, 4, 20), 5000), (date(2025, 5, 20), 5000)):
        for i in range(6):
            transactions.append(make_txn(month_day, -5000, vendor=f"Vendor {i}"))
        transactions.append(make_txn(month_day.replace(day=25), credit, vendor="Customer"))
    return transactions


class StaticSource:
    """In-memory transaction and balance source"""

    def __init__(self, transactions: List[Transaction], cash: Decimal | float = 0):
        self.transactions = transactions
        self.cash = Decimal(str(cash))
        self.calls = []

    def get_organization_transactions(self, organization_id: str, start: date, end: date) -> List[Transaction]:
        self.calls.append((organization_id, start, end))
        return [t for t in self.transactions if start <= t.date < end]

    def get_total_cash(self, user_id: str) -> Decimal:
        return self.cash


@pytest.fixture
def static_source() -> Callable[..., StaticSource]:
    return StaticSource
