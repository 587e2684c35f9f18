"""
Guarded storefront writes.

Each creation runs inside ``EntitlementGuard.creating`` so the quota check,
the insert and the counter increment commit together under the tenant lock.
"""

import re

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.entitlements.guard import EntitlementGuard
from fleeting.platform.billing.exceptions import InvalidPlacement, ResourceNotFound
from fleeting.platform.billing.models import generate_id
from fleeting.platform.billing.usage.models import ResourceKind
from fleeting.platform.billing.usage.service import UsageCounter
from fleeting.platform.commerce.models import (
    Category,
    CategoryCreate,
    CategoryTable,
    Order,
    OrderCreate,
    OrderTable,
    Product,
    ProductCreate,
    ProductTable,
    ProductUpdate,
    Subcategory,
    SubcategoryCreate,
    SubcategoryTable,
)

logger = structlog.get_logger(__name__)


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "item"


class CommerceService:
    """Create and delete quota-bounded resources."""

    def __init__(self, db: AsyncSession, guard: EntitlementGuard):
        self.db = db
        self.guard = guard
        self.usage = UsageCounter(db)

    # Categories

    async def create_category(self, tenant_id: str, data: CategoryCreate) -> Category:
        async with self.guard.creating(tenant_id, ResourceKind.CATEGORY):
            row = CategoryTable(
                id=generate_id("cat"),
                tenant_id=tenant_id,
                name=data.name,
                slug=data.slug or slugify(data.name),
            )
            self.db.add(row)
            await self.usage.record_create(tenant_id, ResourceKind.CATEGORY)
            await self.db.commit()

        logger.info("category.created", tenant_id=tenant_id, category_id=row.id)
        return Category.model_validate(row)

    async def delete_category(self, tenant_id: str, category_id: str) -> None:
        """Delete a category with its subcategories; products are detached."""
        async with self.guard.modifying(tenant_id, "delete"):
            row = await self._get(CategoryTable, tenant_id, category_id, "category")
            await self.db.execute(
                update(ProductTable)
                .where(ProductTable.tenant_id == tenant_id, ProductTable.category_id == category_id)
                .values(category_id=None, subcategory_id=None)
            )
            await self.db.execute(
                delete(SubcategoryTable).where(
                    SubcategoryTable.tenant_id == tenant_id,
                    SubcategoryTable.category_id == category_id,
                )
            )
            await self.db.delete(row)
            await self.usage.record_delete(tenant_id, ResourceKind.CATEGORY, category_id)
            await self.db.commit()

        logger.info("category.deleted", tenant_id=tenant_id, category_id=category_id)

    # Subcategories

    async def create_subcategory(self, tenant_id: str, data: SubcategoryCreate) -> Subcategory:
        """Quota is checked against the parent category's own subcategory count."""
        async with self.guard.creating(
            tenant_id, ResourceKind.SUBCATEGORY, category_id=data.category_id
        ):
            # Under the tenant lock so a concurrent category delete cannot orphan it
            await self._get(CategoryTable, tenant_id, data.category_id, "category")
            row = SubcategoryTable(
                id=generate_id("sub_cat"),
                tenant_id=tenant_id,
                category_id=data.category_id,
                name=data.name,
                slug=data.slug or slugify(data.name),
            )
            self.db.add(row)
            await self.usage.record_create(tenant_id, ResourceKind.SUBCATEGORY, data.category_id)
            await self.db.commit()

        logger.info(
            "subcategory.created",
            tenant_id=tenant_id,
            category_id=data.category_id,
            subcategory_id=row.id,
        )
        return Subcategory.model_validate(row)

    async def delete_subcategory(self, tenant_id: str, subcategory_id: str) -> None:
        async with self.guard.modifying(tenant_id, "delete"):
            row = await self._get(SubcategoryTable, tenant_id, subcategory_id, "subcategory")
            category_id = row.category_id
            await self.db.execute(
                update(ProductTable)
                .where(
                    ProductTable.tenant_id == tenant_id,
                    ProductTable.subcategory_id == subcategory_id,
                )
                .values(subcategory_id=None)
            )
            await self.db.delete(row)
            await self.usage.record_delete(tenant_id, ResourceKind.SUBCATEGORY, category_id)
            await self.db.commit()

        logger.info("subcategory.deleted", tenant_id=tenant_id, subcategory_id=subcategory_id)

    # Products

    async def create_product(self, tenant_id: str, data: ProductCreate) -> Product:
        async with self.guard.creating(tenant_id, ResourceKind.PRODUCT):
            category_id, subcategory_id = await self._resolve_placement(
                tenant_id, data.category_id, data.subcategory_id
            )
            row = ProductTable(
                id=generate_id("prd"),
                tenant_id=tenant_id,
                name=data.name,
                price=data.price,
                category_id=category_id,
                subcategory_id=subcategory_id,
            )
            self.db.add(row)
            await self.usage.record_create(tenant_id, ResourceKind.PRODUCT)
            await self.db.commit()

        logger.info("product.created", tenant_id=tenant_id, product_id=row.id)
        return Product.model_validate(row)

    async def update_product(self, tenant_id: str, product_id: str, data: ProductUpdate) -> Product:
        """Editing never needs quota headroom, only update access."""
        changes = data.model_dump(exclude_unset=True, by_alias=False)
        async with self.guard.modifying(tenant_id, "update"):
            row = await self._get(ProductTable, tenant_id, product_id, "product")
            if "category_id" in changes or "subcategory_id" in changes:
                category_id = changes.get("category_id", row.category_id)
                # Moving to another category drops a subcategory that was not re-chosen
                if "subcategory_id" in changes or category_id == row.category_id:
                    subcategory_id = changes.get("subcategory_id", row.subcategory_id)
                else:
                    subcategory_id = None
                changes["category_id"], changes["subcategory_id"] = await self._resolve_placement(
                    tenant_id, category_id, subcategory_id
                )
            for field, value in changes.items():
                setattr(row, field, value)
            await self.db.commit()
            await self.db.refresh(row)

        return Product.model_validate(row)

    async def delete_product(self, tenant_id: str, product_id: str) -> None:
        async with self.guard.modifying(tenant_id, "delete"):
            row = await self._get(ProductTable, tenant_id, product_id, "product")
            await self.db.delete(row)
            await self.usage.record_delete(tenant_id, ResourceKind.PRODUCT)
            await self.db.commit()

        logger.info("product.deleted", tenant_id=tenant_id, product_id=product_id)

    # Orders

    async def create_order(self, tenant_id: str, data: OrderCreate) -> Order:
        async with self.guard.creating(tenant_id, ResourceKind.ORDER):
            row = OrderTable(
                id=generate_id("ord"),
                tenant_id=tenant_id,
                customer_name=data.customer_name,
                total=data.total,
                status="PENDING",
            )
            self.db.add(row)
            await self.usage.record_create(tenant_id, ResourceKind.ORDER)
            await self.db.commit()

        logger.info("order.created", tenant_id=tenant_id, order_id=row.id)
        return Order.model_validate(row)

    async def _resolve_placement(
        self, tenant_id: str, category_id: str | None, subcategory_id: str | None
    ) -> tuple[str | None, str | None]:
        """Validate where a product sits. A subcategory implies its parent category.

        Raises:
            ResourceNotFound: Unknown category or subcategory
            InvalidPlacement: Subcategory belongs to a different category
        """
        if subcategory_id:
            sub = await self._get(SubcategoryTable, tenant_id, subcategory_id, "subcategory")
            if category_id and category_id != sub.category_id:
                raise InvalidPlacement(subcategory_id, category_id)
            return sub.category_id, subcategory_id
        if category_id:
            await self._get(CategoryTable, tenant_id, category_id, "category")
        return category_id, None

    async def _get(self, table: type, tenant_id: str, resource_id: str, resource_type: str):
        result = await self.db.execute(
            select(table).where(table.id == resource_id, table.tenant_id == tenant_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise ResourceNotFound(resource_type, resource_id)
        return row


__all__ = ["CommerceService", "slugify"]
