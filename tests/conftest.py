"""
Test configuration and fixtures for LendNudge tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from typing import AsyncGenerator
from decimal import Decimal
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from lendnudge.core.database import Base, get_db
from lendnudge.core.dependencies import get_clock
from lendnudge.core.security import create_access_token
from lendnudge.modules.loans.models import Loan
from main import app


# ============================================================
# Time
# ============================================================

# Every test runs at the same instant unless it builds its own clock
NOW = datetime(2024, 3, 10, 15, 30, tzinfo=timezone.utc)
OWNER_ID = "owner-123"
OTHER_OWNER_ID = "owner-456"


@pytest.fixture
def now() -> datetime:
    return NOW


# ============================================================
# Database Fixtures
# ============================================================

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for each test"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


class MutableClock:
    """Clock the tests can move forward"""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(NOW)


@pytest.fixture
async def client(db_session, clock) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and clock overrides"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================
# Auth Fixtures
# ============================================================

@pytest.fixture
def auth_headers():
    """Bearer token for the default test owner"""
    token = create_access_token(data={"sub": OWNER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    """Bearer token for a second owner"""
    token = create_access_token(data={"sub": OTHER_OWNER_ID})
    return {"Authorization": f"Bearer {token}"}


# ============================================================
# Loan Fixtures
# ============================================================

def make_loan(**overrides) -> Loan:
    """Build an unsaved loan; dates default to five days before NOW"""
    fields = dict(
        id="loan-1",
        owner_id=OWNER_ID,
        friend_name="Alex Chen",
        amount=Decimal("50.00"),
        currency="USD",
        date_loaned=NOW.date() - timedelta(days=5),
        reason=None,
        phone_number=None,
        email=None,
        is_paid=False,
        reminder_count=0,
        last_reminder_sent=None,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Loan(**fields)


@pytest.fixture
async def test_loan(db_session):
    """A saved loan from five days ago with no reminders"""
    loan = make_loan(
        id="a" * 32,
        reason="Concert tickets",
        phone_number="+1 (555) 010-9999",
        email="alex@example.com"
    )
    db_session.add(loan)
    await db_session.commit()
    await db_session.refresh(loan)
    return loan


@pytest.fixture
def loan_payload():
    return {
        "friend_name": "Sarah Miller",
        "amount": "125.00",
        "currency": "INR",
        "date_loaned": (NOW.date() - timedelta(days=4)).isoformat(),
        "reason": "Dinner and drinks",
        "phone_number": "+91 98765 43210",
        "email": "sarah@example.com"
    }
