"""
Fixtures for integration tests.

Each test gets a fresh in-memory SQLite database (aiosqlite) with all
ledger tables created, and a ledger facade bound to one session.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from affiliate_ledger.config.database import (
    create_engine,
    create_session_maker,
    init_models,
)
from affiliate_ledger.config.settings import Settings
from affiliate_ledger.models import Order
from affiliate_ledger.services import AffiliateLedger


ADMIN = "admin-1"


@pytest.fixture
def settings():
    """Settings pointing at an in-memory database."""
    return Settings(database_url="sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def engine(settings):
    """Async engine with ledger schema."""
    engine = create_engine(settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Database session for one test."""
    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        yield session


@pytest.fixture
def ledger(db_session, notifier):
    """Ledger facade with recording notifier."""
    return AffiliateLedger(db_session, notifier=notifier)


@pytest.fixture
def create_order(db_session):
    """
    Factory inserting a storefront order.

    Returns:
        Async callable (total, customer_email) -> Order
    """
    async def _create(total="1000", customer_email="buyer@example.com"):
        order = Order(
            total_amount=Decimal(total),
            customer_email=customer_email,
            status="completed",
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _create


@pytest_asyncio.fixture
async def active_affiliate(ledger):
    """Registered and approved affiliate at the default 10% rate."""
    affiliate = await ledger.register_affiliate(
        {
            "business_name": "Partner Shop",
            "email": "partner@example.com",
            "user_id": "user-1",
            "website_url": "https://partner.example.com",
        }
    )
    return await ledger.affiliates.approve_affiliate(affiliate.id, ADMIN)
