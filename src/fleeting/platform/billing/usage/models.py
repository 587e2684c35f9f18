"""
Usage tracking models.

Products, categories and orders are whole-tenant pools. Subcategories are
per-category pools: the limit applies to each category's own count, so the
snapshot reports the largest per-category count rather than a sum.
"""

from enum import Enum

from pydantic import Field, computed_field
from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.db import Base, StrictTenantMixin, TimestampMixin


class ResourceKind(str, Enum):
    """Tenant-owned resources bounded by plan quotas."""

    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"
    SUBCATEGORY = "SUBCATEGORY"
    ORDER = "ORDER"

    @property
    def label(self) -> str:
        return {
            ResourceKind.PRODUCT: "products",
            ResourceKind.CATEGORY: "categories",
            ResourceKind.SUBCATEGORY: "subcategories",
            ResourceKind.ORDER: "orders",
        }[self]


POOLED_KINDS = (ResourceKind.PRODUCT, ResourceKind.CATEGORY, ResourceKind.ORDER)


class UsageCounterTable(Base, StrictTenantMixin, TimestampMixin):
    """Live count of a pooled resource kind for a tenant."""

    __tablename__ = "usage_counters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("tenant_id", "resource_kind", name="uq_usage_counters_tenant_kind"),
    )


class SubcategoryCounterTable(Base, StrictTenantMixin, TimestampMixin):
    """Live subcategory count under one category."""

    __tablename__ = "subcategory_counters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[str] = mapped_column(String(50), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("tenant_id", "category_id", name="uq_subcategory_counters_category"),
    )


class QuotaUsage(BillingBaseModel):
    """Usage of a whole-tenant pool.

    ``remaining`` is ``limit - used`` and goes negative when a tenant is
    over quota (plan edited down, downgrade applied).
    """

    used: int = Field(ge=0)
    limit: int = Field(ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining(self) -> int:
        return self.limit - self.used


class PerCategoryUsage(BillingBaseModel):
    """Usage of the per-category subcategory quota."""

    max_used: int = Field(ge=0)
    limit: int = Field(ge=0)


class UsageSnapshot(BillingBaseModel):
    """Derived usage against the currently effective plan. Never stored."""

    tenant_id: str
    plan_id: str | None = None
    products: QuotaUsage
    categories: QuotaUsage
    orders: QuotaUsage
    subcategories_per_category: PerCategoryUsage
    subcategory_counts: dict[str, int] = Field(default_factory=dict)

    def pool(self, kind: ResourceKind) -> QuotaUsage:
        if kind == ResourceKind.PRODUCT:
            return self.products
        if kind == ResourceKind.CATEGORY:
            return self.categories
        if kind == ResourceKind.ORDER:
            return self.orders
        raise ValueError(f"{kind.value} is counted per category")

    def used_and_limit(
        self, kind: ResourceKind, category_id: str | None = None
    ) -> tuple[int, int]:
        """Count and ceiling that a creation of ``kind`` is checked against."""
        if kind == ResourceKind.SUBCATEGORY:
            limit = self.subcategories_per_category.limit
            if category_id is None:
                return self.subcategories_per_category.max_used, limit
            return self.subcategory_counts.get(category_id, 0), limit
        pool = self.pool(kind)
        return pool.used, pool.limit

    def remaining_for(self, kind: ResourceKind, category_id: str | None = None) -> int:
        used, limit = self.used_and_limit(kind, category_id)
        return limit - used


__all__ = [
    "ResourceKind",
    "POOLED_KINDS",
    "UsageCounterTable",
    "SubcategoryCounterTable",
    "QuotaUsage",
    "PerCategoryUsage",
    "UsageSnapshot",
]
