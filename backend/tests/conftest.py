"""
Pytest configuration and shared fixtures for TechVault Store tests.

Provides an in-memory SQLite DB, an ASGI test client bound to it,
sample accounts/catalog rows, auth header helpers and a Stripe mock.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import MagicMock, patch

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from config import settings
from middleware.auth import issue_access_token
from middleware.rate_limit import limiter

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"
settings.email_api_key = ""
settings.bcrypt_rounds = 4
settings.stripe_secret_key = "sk_test_pytest"
settings.stripe_webhook_secret = "whsec_pytest"


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with an empty rate-limit window."""
    limiter.reset()
    yield
    limiter.reset()


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    ASGI test client with the in-memory database.

    Overrides the get_db dependency to use the test DB session.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Mock Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def mock_stripe():
    """Patch the Stripe SDK entry points used by the payment service."""
    intent = MagicMock()
    intent.id = "pi_test_123"
    intent.client_secret = "pi_test_123_secret_abc"
    intent.status = "requires_payment_method"
    intent.amount = 5319
    intent.currency = "usd"
    intent.receipt_email = None
    intent.metadata = {}

    with patch("stripe.PaymentIntent.create", return_value=intent) as create, \
         patch("stripe.PaymentIntent.retrieve", return_value=intent) as retrieve, \
         patch("stripe.Webhook.construct_event") as construct_event:
        yield {
            "intent": intent,
            "create": create,
            "retrieve": retrieve,
            "construct_event": construct_event,
        }


# ── Test Data Fixtures ────────────────────────────────────────────────


def auth_headers(user) -> dict[str, str]:
    """Bearer header for a persisted user."""
    return {"Authorization": f"Bearer {issue_access_token(user_id=user.id, role=user.role)}"}


@pytest_asyncio.fixture
async def customer(db_session: AsyncSession):
    """A regular customer account (password: secret123)."""
    from services import auth_service

    user = await auth_service.register_user(
        db_session, name="Casey Customer", email="casey@example.com", password="secret123"
    )
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def other_customer(db_session: AsyncSession):
    from services import auth_service

    user = await auth_service.register_user(
        db_session, name="Robin Other", email="robin@example.com", password="secret123"
    )
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession):
    """An admin account."""
    from services import auth_service

    user = await auth_service.register_user(
        db_session, name="Admin User", email="admin@techvault.com", password="admin123", role="admin"
    )
    await db_session.commit()
    return user


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest_asyncio.fixture
async def sample_category(db_session: AsyncSession):
    """A 'Laptops' category."""
    from services import catalog_service

    category = await catalog_service.create_category(
        db_session, name="Laptops", description="Portable computers"
    )
    await db_session.commit()
    return category


def product_fields(**overrides) -> dict:
    """Valid create_product keyword arguments; override per test."""
    fields = {
        "name": "ThinkPad X1 Carbon",
        "description": "14 inch business ultrabook",
        "price": 20.0,
        "brand": "Lenovo",
        "condition": "excellent",
        "stock_count": 5,
        "sku": "lnv-x1c",
        "images": ["https://img.example/x1c.jpg"],
    }
    fields.update(overrides)
    return fields


@pytest_asyncio.fixture
async def sample_product(db_session: AsyncSession, sample_category):
    """An in-stock product priced at 20.00 with 5 units."""
    from services import catalog_service

    product = await catalog_service.create_product(
        db_session, category_id=sample_category.id, **product_fields()
    )
    await db_session.commit()
    return product
