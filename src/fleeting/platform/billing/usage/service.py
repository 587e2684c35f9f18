"""
Usage counter service.

Counters are adjusted inside the caller's transaction (the guarded write
path flushes the counter with the resource row and commits both together).
"""

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.billing.usage.models import (
    POOLED_KINDS,
    PerCategoryUsage,
    QuotaUsage,
    ResourceKind,
    SubcategoryCounterTable,
    UsageCounterTable,
    UsageSnapshot,
)
from fleeting.platform.commerce.models import (
    CategoryTable,
    OrderTable,
    ProductTable,
    SubcategoryTable,
)

logger = structlog.get_logger(__name__)


class UsageCounter:
    """Maintain live per-tenant resource counts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_create(
        self, tenant_id: str, kind: ResourceKind, category_id: str | None = None
    ) -> int:
        """Increment the counter for ``kind``. Returns the new count."""
        return await self._adjust(tenant_id, kind, 1, category_id)

    async def record_delete(
        self, tenant_id: str, kind: ResourceKind, category_id: str | None = None
    ) -> int:
        """Decrement the counter for ``kind`` (never below zero).

        Deleting a category also drops its subcategory counter.
        """
        count = await self._adjust(tenant_id, kind, -1, category_id)
        if kind == ResourceKind.CATEGORY and category_id is not None:
            await self.db.execute(
                delete(SubcategoryCounterTable).where(
                    SubcategoryCounterTable.tenant_id == tenant_id,
                    SubcategoryCounterTable.category_id == category_id,
                )
            )
        return count

    async def counts(self, tenant_id: str) -> tuple[dict[ResourceKind, int], dict[str, int]]:
        """Current pooled counts and per-category subcategory counts."""
        pooled = {kind: 0 for kind in POOLED_KINDS}
        result = await self.db.execute(
            select(UsageCounterTable).where(UsageCounterTable.tenant_id == tenant_id)
        )
        for row in result.scalars().all():
            pooled[ResourceKind(row.resource_kind)] = row.count

        result = await self.db.execute(
            select(SubcategoryCounterTable).where(SubcategoryCounterTable.tenant_id == tenant_id)
        )
        per_category = {row.category_id: row.count for row in result.scalars().all()}
        return pooled, per_category

    async def snapshot(self, tenant_id: str, plan: Plan | None) -> UsageSnapshot:
        """Usage against ``plan`` (the currently effective plan).

        With no plan every limit is zero.
        """
        pooled, per_category = await self.counts(tenant_id)
        return build_snapshot(tenant_id, plan, pooled, per_category)

    async def reconcile(self, tenant_id: str) -> dict[str, tuple[int, int]]:
        """Recount from the resource tables and overwrite drifted counters.

        Returns:
            Drifted pooled kinds mapped to (counted, actual).
        """
        actual = {
            ResourceKind.PRODUCT: await self._count_rows(ProductTable, tenant_id),
            ResourceKind.CATEGORY: await self._count_rows(CategoryTable, tenant_id),
            ResourceKind.ORDER: await self._count_rows(OrderTable, tenant_id),
        }
        result = await self.db.execute(
            select(SubcategoryTable.category_id, func.count())
            .where(SubcategoryTable.tenant_id == tenant_id)
            .group_by(SubcategoryTable.category_id)
        )
        actual_sub = {category_id: int(n) for category_id, n in result.all()}

        pooled, per_category = await self.counts(tenant_id)
        drift = {k.value: (pooled[k], v) for k, v in actual.items() if pooled[k] != v}

        for kind, value in actual.items():
            row = await self._counter_row(tenant_id, kind)
            row.count = value
        await self.db.execute(
            delete(SubcategoryCounterTable).where(SubcategoryCounterTable.tenant_id == tenant_id)
        )
        for category_id, value in actual_sub.items():
            self.db.add(
                SubcategoryCounterTable(tenant_id=tenant_id, category_id=category_id, count=value)
            )
        await self.db.commit()

        if drift or actual_sub != per_category:
            logger.warning(
                "usage.reconciled_with_drift",
                tenant_id=tenant_id,
                drift=drift,
                subcategory_drift=actual_sub != per_category,
            )
        else:
            logger.info("usage.reconciled", tenant_id=tenant_id)
        return drift

    async def _adjust(
        self, tenant_id: str, kind: ResourceKind, delta: int, category_id: str | None
    ) -> int:
        if kind == ResourceKind.SUBCATEGORY:
            if not category_id:
                raise ValueError("Subcategory usage requires a category_id")
            row = await self._subcategory_row(tenant_id, category_id)
        else:
            row = await self._counter_row(tenant_id, kind)

        row.count = max(0, row.count + delta)
        await self.db.flush()
        logger.debug(
            "usage.adjusted",
            tenant_id=tenant_id,
            resource_kind=kind.value,
            category_id=category_id,
            count=row.count,
        )
        return row.count

    async def _counter_row(self, tenant_id: str, kind: ResourceKind) -> UsageCounterTable:
        result = await self.db.execute(
            select(UsageCounterTable)
            .where(
                UsageCounterTable.tenant_id == tenant_id,
                UsageCounterTable.resource_kind == kind.value,
            )
            .with_for_update()
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = UsageCounterTable(tenant_id=tenant_id, resource_kind=kind.value, count=0)
            self.db.add(row)
        return row

    async def _subcategory_row(self, tenant_id: str, category_id: str) -> SubcategoryCounterTable:
        result = await self.db.execute(
            select(SubcategoryCounterTable)
            .where(
                SubcategoryCounterTable.tenant_id == tenant_id,
                SubcategoryCounterTable.category_id == category_id,
            )
            .with_for_update()
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = SubcategoryCounterTable(tenant_id=tenant_id, category_id=category_id, count=0)
            self.db.add(row)
        return row

    async def _count_rows(self, table: type, tenant_id: str) -> int:
        count = await self.db.scalar(
            select(func.count()).select_from(table).where(table.tenant_id == tenant_id)
        )
        return int(count or 0)


def build_snapshot(
    tenant_id: str,
    plan: Plan | None,
    pooled: dict[ResourceKind, int],
    per_category: dict[str, int],
) -> UsageSnapshot:
    """Combine counts with plan limits."""
    return UsageSnapshot(
        tenant_id=tenant_id,
        plan_id=plan.id if plan else None,
        products=QuotaUsage(
            used=pooled.get(ResourceKind.PRODUCT, 0), limit=plan.max_products if plan else 0
        ),
        categories=QuotaUsage(
            used=pooled.get(ResourceKind.CATEGORY, 0), limit=plan.max_categories if plan else 0
        ),
        orders=QuotaUsage(
            used=pooled.get(ResourceKind.ORDER, 0), limit=plan.max_orders if plan else 0
        ),
        subcategories_per_category=PerCategoryUsage(
            max_used=max(per_category.values(), default=0),
            limit=plan.max_subcategories_per_category if plan else 0,
        ),
        subcategory_counts=dict(per_category),
    )


__all__ = ["UsageCounter", "build_snapshot"]
