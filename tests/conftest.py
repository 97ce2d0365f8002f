"""
Pytest configuration for the invoice dashboard.

Provides fixtures for:
- A fresh file-backed SQLite database per test (schema created, no rows)
- The query, mutation and auth services bound to that database
- Factories for inserting customers, invoices, revenue and users directly
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import AsyncIterator, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.db.engine import create_engine
from app.db.schema import customers, invoices, revenue, users
from app.services.actions import InvoiceActions
from app.services.auth import Authenticator, hash_password
from app.services.data import DashboardData
from scripts.init_db import create_schema

# bcrypt's minimum cost keeps the auth tests fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'dashboard.db'}",
        log_level="DEBUG",
        session_secret="test-secret",
    )


@pytest_asyncio.fixture
async def bare_engine(test_settings: Settings) -> AsyncIterator[AsyncEngine]:
    """An engine whose database has no tables, for store-failure paths."""
    engine = create_engine(test_settings)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def engine(bare_engine: AsyncEngine) -> AsyncEngine:
    await create_schema(bare_engine, drop=False)
    return bare_engine


@pytest.fixture
def data(engine: AsyncEngine) -> DashboardData:
    return DashboardData(engine)


@pytest.fixture
def stale_paths() -> List[str]:
    return []


@pytest.fixture
def actions(engine: AsyncEngine, stale_paths: List[str]) -> InvoiceActions:
    return InvoiceActions(engine, revalidate=stale_paths.append)


@pytest.fixture
def authenticator(engine: AsyncEngine) -> Authenticator:
    return Authenticator(engine)


@pytest.fixture
def make_customer(engine: AsyncEngine):
    async def _make(name: str, email: str | None = None, image_url: str = "/customers/x.png"):
        customer_id = uuid.uuid4()
        async with engine.begin() as conn:
            await conn.execute(
                customers.insert().values(
                    id=customer_id,
                    name=name,
                    email=email or f"{name.lower().replace(' ', '.')}@example.com",
                    image_url=image_url,
                )
            )
        return customer_id

    return _make


@pytest.fixture
def make_invoice(engine: AsyncEngine):
    async def _make(
        customer_id: uuid.UUID,
        amount: int,
        status: str = "pending",
        on: date = date(2023, 6, 1),
    ):
        invoice_id = uuid.uuid4()
        async with engine.begin() as conn:
            await conn.execute(
                invoices.insert().values(
                    id=invoice_id,
                    customer_id=customer_id,
                    amount=amount,
                    status=status,
                    date=on,
                )
            )
        return invoice_id

    return _make


@pytest.fixture
def make_revenue(engine: AsyncEngine):
    async def _make(month: str, cents: int) -> None:
        async with engine.begin() as conn:
            await conn.execute(revenue.insert().values(month=month, revenue=cents))

    return _make


@pytest.fixture
def make_user(engine: AsyncEngine):
    async def _make(email: str, password: str, name: str = "Test User"):
        user_id = uuid.uuid4()
        async with engine.begin() as conn:
            await conn.execute(
                users.insert().values(
                    id=user_id,
                    name=name,
                    email=email,
                    password=hash_password(password, rounds=TEST_BCRYPT_ROUNDS),
                )
            )
        return user_id

    return _make


@pytest_asyncio.fixture
async def acme(make_customer, make_invoice) -> dict:
    """One customer, "Acme Co", with a paid $100 and a pending $50 invoice."""
    customer_id = await make_customer("Acme Co", email="billing@acme.co")
    paid_id = await make_invoice(customer_id, 10000, "paid", date(2023, 5, 1))
    pending_id = await make_invoice(customer_id, 5000, "pending", date(2023, 6, 1))
    return {"customer_id": customer_id, "paid_id": paid_id, "pending_id": pending_id}
