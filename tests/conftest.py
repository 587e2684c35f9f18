"""
Global pytest configuration and fixtures for Fleeting Platform Services tests.

Each test gets a fresh in-memory SQLite database shared by the test's own
session and the application's request sessions.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OBSERVABILITY__LOG_FORMAT", "text")

from collections.abc import AsyncIterator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import fleeting.platform.models  # noqa: E402,F401
from fleeting.platform.auth.core import create_access_token  # noqa: E402
from fleeting.platform.billing.locking import TenantLockManager, get_lock_manager  # noqa: E402
from fleeting.platform.billing.plans.models import Plan, PlanCreateRequest  # noqa: E402
from fleeting.platform.billing.plans.service import PlanCatalog  # noqa: E402
from fleeting.platform.db import Base, set_session_maker  # noqa: E402
from fleeting.platform.main import create_application  # noqa: E402
from fleeting.platform.settings import settings  # noqa: E402

TENANT_ID = "store-alpha"
OTHER_TENANT_ID = "store-beta"

# Fixed evaluation instant for lifecycle tests
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    set_session_maker(maker)
    yield maker
    set_session_maker(None)


@pytest.fixture
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def locks() -> TenantLockManager:
    return TenantLockManager(timeout=2.0)


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


async def _create_plan(db: AsyncSession, **fields) -> Plan:
    return await PlanCatalog(db).create(PlanCreateRequest(**fields))


@pytest.fixture
async def trial_plan(db_session) -> Plan:
    return await _create_plan(
        db_session,
        name=settings.billing.trial_plan_name,
        price=Decimal("0"),
        trial_days=14,
        max_products=10,
        max_categories=3,
        max_subcategories_per_category=3,
        max_orders=50,
    )


@pytest.fixture
async def free_plan(db_session) -> Plan:
    """Free plan without a trial, selectable directly."""
    return await _create_plan(
        db_session,
        name="Hobby",
        price=Decimal("0"),
        max_products=5,
        max_categories=2,
        max_subcategories_per_category=2,
        max_orders=20,
    )


@pytest.fixture
async def starter_plan(db_session) -> Plan:
    return await _create_plan(
        db_session,
        name="Starter",
        price=Decimal("499"),
        max_products=100,
        max_categories=10,
        max_subcategories_per_category=5,
        max_orders=500,
    )


@pytest.fixture
async def growth_plan(db_session) -> Plan:
    return await _create_plan(
        db_session,
        name="Growth",
        price=Decimal("1499"),
        max_products=1000,
        max_categories=50,
        max_subcategories_per_category=20,
        max_orders=5000,
        custom_domain=True,
    )


@pytest.fixture
async def plans(trial_plan, free_plan, starter_plan, growth_plan) -> dict[str, Plan]:
    return {
        "trial": trial_plan,
        "free": free_plan,
        "starter": starter_plan,
        "growth": growth_plan,
    }


# ---------------------------------------------------------------------------
# HTTP client and tokens
# ---------------------------------------------------------------------------


@pytest.fixture
def owner_token() -> str:
    return create_access_token("user-owner", tenant_id=TENANT_ID, email="owner@example.com")


@pytest.fixture
def admin_token() -> str:
    return create_access_token("user-admin", is_platform_admin=True, roles=["platform_admin"])


@pytest.fixture
def owner_headers(owner_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {owner_token}"}


@pytest.fixture
def admin_headers(admin_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
async def client(session_maker, locks) -> AsyncIterator[AsyncClient]:
    app = create_application()
    app.dependency_overrides[get_lock_manager] = lambda: locks
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
