"""Pytest configuration and fixtures."""
import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.rate_limit import limiter
from app.services.currency import CurrencyNormalizer, ExchangeRateCache, get_currency_normalizer
from app.services.shopify_client import get_order_source
from main import app

from factories import FakeOrderSource, create_user


@pytest.fixture
async def test_db():
    """Create test database."""
    TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    AsyncSessionLocal = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def fake_orders():
    """Order source with no orders; tests fill ``fake_orders.orders``."""
    return FakeOrderSource()


def _rates_unavailable(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": "unavailable"})


@pytest.fixture
def normalizer():
    """Normalizer whose rate service is down, so the static fallback rates apply."""
    return CurrencyNormalizer(cache=ExchangeRateCache(), transport=httpx.MockTransport(_rates_unavailable))


@pytest.fixture(autouse=True)
def disable_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
async def client(test_db, fake_orders, normalizer):
    """HTTP client bound to the test database, fake Shopify and offline rates."""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_source] = lambda: fake_orders
    app.dependency_overrides[get_currency_normalizer] = lambda: normalizer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def creator(test_db):
    return await create_user(test_db, "creator@example.com", name="Ada Creator")


@pytest.fixture
async def pending_creator(test_db):
    return await create_user(test_db, "pending@example.com", name="Pending Creator", approved=False)


@pytest.fixture
async def admin(test_db):
    return await create_user(test_db, "admin@example.com", name="Admin", role="admin")
