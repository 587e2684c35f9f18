"""
Tests for usage counters and snapshots.
"""

import pytest

from fleeting.platform.billing.usage.models import ResourceKind
from fleeting.platform.billing.usage.service import UsageCounter
from fleeting.platform.commerce.models import CategoryTable, ProductTable, SubcategoryTable
from tests.conftest import OTHER_TENANT_ID, TENANT_ID


class TestUsageCounter:
    """Counter maintenance."""

    async def test_used_plus_remaining_equals_limit(self, db_session, starter_plan):
        usage = UsageCounter(db_session)
        for _ in range(3):
            await usage.record_create(TENANT_ID, ResourceKind.PRODUCT)
        await db_session.commit()

        snapshot = await usage.snapshot(TENANT_ID, starter_plan)

        assert snapshot.products.used == 3
        assert snapshot.products.used + snapshot.products.remaining == snapshot.products.limit
        assert snapshot.products.limit == starter_plan.max_products

    async def test_delete_never_goes_below_zero(self, db_session):
        usage = UsageCounter(db_session)

        count = await usage.record_delete(TENANT_ID, ResourceKind.ORDER)

        assert count == 0

    async def test_counters_are_isolated_per_tenant(self, db_session, starter_plan):
        usage = UsageCounter(db_session)
        await usage.record_create(TENANT_ID, ResourceKind.CATEGORY)
        await usage.record_create(TENANT_ID, ResourceKind.CATEGORY)
        await usage.record_create(OTHER_TENANT_ID, ResourceKind.CATEGORY)
        await db_session.commit()

        ours = await usage.snapshot(TENANT_ID, starter_plan)
        theirs = await usage.snapshot(OTHER_TENANT_ID, starter_plan)

        assert ours.categories.used == 2
        assert theirs.categories.used == 1

    async def test_subcategories_are_counted_per_category(self, db_session, starter_plan):
        usage = UsageCounter(db_session)
        for _ in range(5):
            await usage.record_create(TENANT_ID, ResourceKind.SUBCATEGORY, "cat_a")
        for _ in range(2):
            await usage.record_create(TENANT_ID, ResourceKind.SUBCATEGORY, "cat_b")
        await db_session.commit()

        snapshot = await usage.snapshot(TENANT_ID, starter_plan)

        assert snapshot.subcategories_per_category.max_used == 5
        assert snapshot.subcategories_per_category.limit == 5
        assert snapshot.remaining_for(ResourceKind.SUBCATEGORY, "cat_a") == 0
        assert snapshot.remaining_for(ResourceKind.SUBCATEGORY, "cat_b") == 3

    async def test_subcategory_requires_category(self, db_session):
        usage = UsageCounter(db_session)

        with pytest.raises(ValueError):
            await usage.record_create(TENANT_ID, ResourceKind.SUBCATEGORY)

    async def test_deleting_category_drops_its_subcategory_counter(self, db_session, starter_plan):
        usage = UsageCounter(db_session)
        await usage.record_create(TENANT_ID, ResourceKind.CATEGORY)
        await usage.record_create(TENANT_ID, ResourceKind.SUBCATEGORY, "cat_a")
        await usage.record_delete(TENANT_ID, ResourceKind.CATEGORY, "cat_a")
        await db_session.commit()

        snapshot = await usage.snapshot(TENANT_ID, starter_plan)

        assert snapshot.categories.used == 0
        assert "cat_a" not in snapshot.subcategory_counts

    async def test_snapshot_without_plan_has_zero_limits(self, db_session):
        usage = UsageCounter(db_session)
        await usage.record_create(TENANT_ID, ResourceKind.PRODUCT)

        snapshot = await usage.snapshot(TENANT_ID, None)

        assert snapshot.plan_id is None
        assert snapshot.products.limit == 0
        assert snapshot.products.remaining == -1


class TestReconcile:
    """Recounting from the resource tables."""

    async def test_reconcile_reports_and_fixes_drift(self, db_session, starter_plan):
        db_session.add(CategoryTable(id="cat_1", tenant_id=TENANT_ID, name="Shoes", slug="shoes"))
        db_session.add(
            SubcategoryTable(
                id="sub_1", tenant_id=TENANT_ID, category_id="cat_1", name="Boots", slug="boots"
            )
        )
        db_session.add(ProductTable(id="prd_1", tenant_id=TENANT_ID, name="Boot", price=10))
        db_session.add(ProductTable(id="prd_2", tenant_id=TENANT_ID, name="Sandal", price=5))
        await db_session.commit()

        usage = UsageCounter(db_session)
        drift = await usage.reconcile(TENANT_ID)

        assert drift == {"PRODUCT": (0, 2), "CATEGORY": (0, 1)}
        snapshot = await usage.snapshot(TENANT_ID, starter_plan)
        assert snapshot.products.used == 2
        assert snapshot.subcategory_counts == {"cat_1": 1}

    async def test_reconcile_in_sync_reports_nothing(self, db_session):
        usage = UsageCounter(db_session)

        assert await usage.reconcile(TENANT_ID) == {}
