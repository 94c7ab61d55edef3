"""
Stock Portfolio Tracker - Test Configuration
Shared fixtures and test configuration.
"""
import os
import sys
from datetime import date, datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_TO_FILE"] = "false"

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker  # noqa: E402

from stock_tracker.core.security import create_access_token, get_password_hash  # noqa: E402
from stock_tracker.db.database import build_engine, build_session_maker, init_db  # noqa: E402
from stock_tracker.db.models.user import User  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =========================
# Database Fixtures
# =========================

@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with the schema created."""
    test_engine = build_engine(TEST_DATABASE_URL)
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return build_session_maker(engine)


async def _create_user(session_maker, username: str, is_superuser: bool = False) -> User:
    async with session_maker() as session:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash("SecurePassword123!"),
            is_active=True,
            is_superuser=is_superuser,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def user(session_maker) -> User:
    """Seeded regular user."""
    return await _create_user(session_maker, "testuser")


@pytest_asyncio.fixture
async def other_user(session_maker) -> User:
    """A second user whose data must stay isolated."""
    return await _create_user(session_maker, "otheruser")


@pytest_asyncio.fixture
async def admin_user(session_maker) -> User:
    return await _create_user(session_maker, "admin", is_superuser=True)


# =========================
# API Fixtures
# =========================

@pytest_asyncio.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app that uses the test database."""
    from stock_tracker.main import create_application

    app = create_application(bind=engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth_headers(user) -> dict:
    token, _ = create_access_token(subject=user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user) -> dict:
    token, _ = create_access_token(subject=admin_user.id)
    return {"Authorization": f"Bearer {token}"}


# =========================
# Record Fixtures
# =========================

@pytest.fixture
def today() -> date:
    return date(2024, 3, 11)


@pytest.fixture
def sample_position_records() -> list:
    """Portfolio as the web client sends it (camelCase, partly sparse)."""
    return [
        {
            "ticker": "TCS",
            "name": "Tata Consultancy Services",
            "sector": "IT",
            "buyPrice": 3500,
            "currentPrice": 3800.5,
            "quantity": 10,
            "purchaseDate": "2024-01-15",
            "lastUpdated": "2024-03-10T09:30:00Z",
        },
        {
            "symbol": "INFY",
            "buyPrice": "1450.25",
            "quantity": 4,
            "purchaseDate": "2024-02-01",
            "lastUpdated": "2024-03-10T09:30:00Z",
        },
    ]


@pytest.fixture
def sample_watchlist_records() -> list:
    return [
        {
            "symbol": "HDFCBANK",
            "name": "HDFC Bank",
            "sector": "Banking",
            "currentPrice": 1510,
            "targetPrice": 1700,
            "addedDate": "2024-02-20",
            "lastUpdated": "2024-03-10T09:30:00",
        },
        {
            "symbol": "WIPRO",
            "addedDate": "2024-03-01",
            "lastUpdated": "2024-03-10T09:30:00",
        },
    ]


@pytest.fixture
def sample_closed_records() -> list:
    return [
        {
            "symbol": "RELIANCE",
            "buyPrice": 2400,
            "sellPrice": 2650,
            "quantity": 5,
            "buyDate": "2024-01-01",
            "sellDate": "2024-01-11",
        },
        {
            "ticker": "ITC",
            "buyPrice": 450,
            "closePrice": 430,
            "quantity": 20,
            "purchaseDate": "2023-12-01",
            "closedDate": "2024-02-15",
            "notes": "Stop loss hit",
        },
    ]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 11, 10, 0, 0)
