"""
Tests for per-tenant serialization.
"""

import asyncio

import pytest

from fleeting.platform.billing.entitlements.guard import EntitlementGuard
from fleeting.platform.billing.exceptions import QuotaExceeded, TenantBusy
from fleeting.platform.billing.locking import TenantLockManager
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.billing.usage.models import ResourceKind
from fleeting.platform.billing.usage.service import UsageCounter
from tests.conftest import NOW, OTHER_TENANT_ID, TENANT_ID


class TestTenantLockManager:
    """Lock acquisition."""

    async def test_released_tenants_are_evicted(self):
        locks = TenantLockManager()

        async with locks.hold(TENANT_ID):
            assert len(locks) == 1
            assert locks.is_held(TENANT_ID)

        assert len(locks) == 0
        assert locks.is_held(TENANT_ID) is False

    async def test_waiter_keeps_lock_alive(self):
        locks = TenantLockManager(timeout=1.0)
        order: list[str] = []

        async def second() -> None:
            async with locks.hold(TENANT_ID):
                order.append("second")

        async with locks.hold(TENANT_ID):
            waiter = asyncio.create_task(second())
            await asyncio.sleep(0)
            order.append("first")

        await waiter
        assert order == ["first", "second"]
        assert len(locks) == 0

    async def test_timed_out_waiter_is_not_leaked(self):
        locks = TenantLockManager(timeout=0.05)

        async with locks.hold(TENANT_ID):
            with pytest.raises(TenantBusy):
                async with locks.hold(TENANT_ID):
                    pass
            assert len(locks) == 1

        assert len(locks) == 0

    async def test_timeout_raises_tenant_busy(self):
        locks = TenantLockManager(timeout=0.05)

        async with locks.hold(TENANT_ID):
            with pytest.raises(TenantBusy) as exc_info:
                async with locks.hold(TENANT_ID):
                    pass

        assert exc_info.value.status_code == 409
        assert locks.is_held(TENANT_ID) is False

    async def test_other_tenants_do_not_contend(self):
        locks = TenantLockManager(timeout=0.05)

        async with locks.hold(TENANT_ID):
            async with locks.hold(OTHER_TENANT_ID):
                assert locks.is_held(TENANT_ID)
                assert locks.is_held(OTHER_TENANT_ID)


class TestConcurrentCreation:
    """Quota check and increment are atomic per tenant."""

    async def test_last_slot_is_granted_once(self, session_maker, db_session, locks, plans):
        free = plans["free"]
        await SubscriptionLifecycle(db_session, locks).select_plan(TENANT_ID, free.id, now=NOW)
        usage = UsageCounter(db_session)
        for _ in range(free.max_products - 1):
            await usage.record_create(TENANT_ID, ResourceKind.PRODUCT)
        await db_session.commit()

        async def attempt() -> bool:
            async with session_maker() as session:
                guard = EntitlementGuard(session, locks)
                try:
                    async with guard.creating(TENANT_ID, ResourceKind.PRODUCT, now=NOW):
                        await asyncio.sleep(0)
                        await UsageCounter(session).record_create(TENANT_ID, ResourceKind.PRODUCT)
                        await session.commit()
                except QuotaExceeded:
                    return False
                return True

        results = await asyncio.gather(attempt(), attempt())

        assert sorted(results) == [False, True]
        async with session_maker() as session:
            snapshot = await UsageCounter(session).snapshot(TENANT_ID, free)
        assert snapshot.products.used == free.max_products
