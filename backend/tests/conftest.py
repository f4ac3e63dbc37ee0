"""Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite); the app's
``get_db`` dependency is overridden to use it.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from finledger.config import settings  # noqa: E402
from finledger.core.database import get_db  # noqa: E402
from finledger.main import app  # noqa: E402
from finledger.models import (  # noqa: E402
    AccountType,
    Base,
    Category,
    Currency,
    State,
    TransactionType,
    User,
)

ALICE_ID = 1
BOB_ID = 2

GROCERIES = 1
SALARY = 2
RENT = 3

INCOME = 1
EXPENSE = 2

PENDING = 1
COMPLETED = 2


def make_token(user_id: int, **claims) -> str:
    payload = {"id": user_id, "email": f"user{user_id}@example.com", "fullName": f"User {user_id}"}
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        session.add_all([
            User(id=ALICE_ID, email="alice@example.com", full_name="Alice"),
            User(id=BOB_ID, email="bob@example.com", full_name="Bob"),
            Category(id=GROCERIES, name="Groceries"),
            Category(id=SALARY, name="Salary"),
            Category(id=RENT, name="Rent"),
            Currency(id=1, name="USD"),
            Currency(id=2, name="EUR"),
            AccountType(id=1, name="Checking"),
            AccountType(id=2, name="Savings"),
            TransactionType(id=INCOME, name="Income"),
            TransactionType(id=EXPENSE, name="Expense"),
            State(id=PENDING, name="Pending"),
            State(id=COMPLETED, name="Completed"),
        ])
        await session.commit()

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """A session for service-level tests (flushed, never committed)."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory):
    """Async test client for the FastAPI app."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(ALICE_ID)}"}


@pytest.fixture
def bob_headers():
    return {"Authorization": f"Bearer {make_token(BOB_ID)}"}
