"""
Tests for the entitlement service and write guard.
"""

from datetime import timedelta

import pytest

from fleeting.platform.auth.core import UserInfo
from fleeting.platform.billing.entitlements.guard import EntitlementGuard
from fleeting.platform.billing.entitlements.service import EntitlementService
from fleeting.platform.billing.exceptions import AccessDenied, QuotaExceeded
from fleeting.platform.billing.plans.models import PlanUpdateRequest
from fleeting.platform.billing.subscriptions.models import SubscriptionStatus
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.billing.usage.models import ResourceKind
from tests.conftest import NOW, TENANT_ID


@pytest.fixture
def entitlements(db_session, locks) -> EntitlementService:
    return EntitlementService(db_session, locks)


@pytest.fixture
def guard(db_session, locks) -> EntitlementGuard:
    return EntitlementGuard(db_session, locks)


@pytest.fixture
def lifecycle(db_session, locks) -> SubscriptionLifecycle:
    return SubscriptionLifecycle(db_session, locks)


async def fill(guard: EntitlementGuard, kind: ResourceKind, n: int, category_id=None, now=NOW):
    usage = guard.entitlements.usage
    for _ in range(n):
        async with guard.creating(TENANT_ID, kind, category_id, now=now):
            await usage.record_create(TENANT_ID, kind, category_id)
            await guard.db.commit()


class TestEntitlementService:
    """Loading state and evaluating."""

    async def test_no_subscription_state(self, entitlements, plans):
        state = await entitlements.current_state(TENANT_ID, now=NOW)

        assert state.subscription is None
        assert state.plan is None
        assert state.access.has_access is False
        assert state.usage.products.limit == 0

    async def test_lazy_expiry_is_persisted_by_read(self, entitlements, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)

        state = await entitlements.current_state(TENANT_ID, now=NOW + timedelta(days=32))

        assert state.subscription.status == SubscriptionStatus.EXPIRED
        assert state.access.is_in_grace_period is True
        stored = await lifecycle.get_current(TENANT_ID)
        assert stored.status == SubscriptionStatus.EXPIRED

    async def test_plan_edit_applies_at_next_evaluation(self, entitlements, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)
        await lifecycle.catalog.update(plans["free"].id, PlanUpdateRequest(max_products=42))

        state = await entitlements.current_state(TENANT_ID, now=NOW)

        assert state.usage.products.limit == 42

    async def test_pending_downgrade_keeps_current_quotas(self, entitlements, lifecycle, plans):
        result = await lifecycle.select_plan(TENANT_ID, plans["growth"].id, now=NOW)
        await lifecycle.confirm_payment(result.payment_id, True, now=NOW)
        await lifecycle.downgrade(TENANT_ID, plans["free"].id, now=NOW)

        state = await entitlements.current_state(TENANT_ID, now=NOW + timedelta(days=1))

        assert state.usage.products.limit == plans["growth"].max_products
        assert state.pending_plan.id == plans["free"].id

    async def test_session_bundle(self, entitlements, lifecycle, plans):
        await lifecycle.activate_trial(TENANT_ID, now=NOW)
        user = UserInfo(user_id="user-owner", tenant_id=TENANT_ID)

        bundle = await entitlements.session(user, TENANT_ID, now=NOW)

        assert bundle.user.user_id == "user-owner"
        assert bundle.tenant.has_used_trial is True
        assert bundle.subscription.plan.id == plans["trial"].id
        assert bundle.access.message == "Trial ends in 14 days"
        assert bundle.unread_notifications == 1

    async def test_require_feature_denied_on_plan_without_it(self, entitlements, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)

        with pytest.raises(AccessDenied, match="does not include custom domain"):
            await entitlements.require_feature(TENANT_ID, "custom_domain", now=NOW)

    async def test_require_feature_allowed(self, entitlements, lifecycle, plans):
        result = await lifecycle.select_plan(TENANT_ID, plans["growth"].id, now=NOW)
        await lifecycle.confirm_payment(result.payment_id, True, now=NOW)

        access = await entitlements.require_feature(TENANT_ID, "custom_domain", now=NOW)

        assert access.has_access is True

    async def test_unknown_feature(self, entitlements):
        with pytest.raises(ValueError):
            await entitlements.require_feature(TENANT_ID, "teleport", now=NOW)


class TestEntitlementGuard:
    """Authoritative write-path checks."""

    async def test_create_until_limit_then_quota_exceeded(self, guard, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)
        await fill(guard, ResourceKind.PRODUCT, plans["free"].max_products)

        with pytest.raises(QuotaExceeded) as exc_info:
            await fill(guard, ResourceKind.PRODUCT, 1)

        error = exc_info.value
        assert error.status_code == 403
        assert error.message == "Plan limit reached: 5/5 products"
        assert error.context["used"] == 5
        assert error.context["limit"] == 5

    async def test_no_subscription_is_access_denied(self, guard, plans):
        with pytest.raises(AccessDenied, match="No active subscription"):
            await fill(guard, ResourceKind.CATEGORY, 1)

    async def test_grace_period_blocks_creation_but_allows_update(self, guard, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)
        in_grace = NOW + timedelta(days=33)

        with pytest.raises(AccessDenied):
            await fill(guard, ResourceKind.PRODUCT, 1, now=in_grace)

        async with guard.modifying(TENANT_ID, "update", now=in_grace) as decision:
            assert decision.is_in_grace_period is True

    async def test_beyond_grace_blocks_update(self, guard, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)

        with pytest.raises(AccessDenied):
            async with guard.modifying(TENANT_ID, "delete", now=NOW + timedelta(days=40)):
                pass

    async def test_subcategory_limit_is_per_category(self, guard, lifecycle, plans):
        await lifecycle.select_plan(TENANT_ID, plans["free"].id, now=NOW)
        limit = plans["free"].max_subcategories_per_category
        await fill(guard, ResourceKind.SUBCATEGORY, limit, category_id="cat_a")

        with pytest.raises(QuotaExceeded, match="in this category"):
            await fill(guard, ResourceKind.SUBCATEGORY, 1, category_id="cat_a")
        await fill(guard, ResourceKind.SUBCATEGORY, 1, category_id="cat_b")

    async def test_subcategory_requires_category(self, guard):
        with pytest.raises(ValueError):
            async with guard.creating(TENANT_ID, ResourceKind.SUBCATEGORY):
                pass

    async def test_guard_releases_lock_after_denial(self, guard, locks, plans):
        with pytest.raises(AccessDenied):
            await fill(guard, ResourceKind.ORDER, 1)

        assert locks.is_held(TENANT_ID) is False
