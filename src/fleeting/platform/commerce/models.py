"""
Storefront resources bounded by plan quotas.

Only what the guarded write path needs is modelled here; storefront
content and presentation live elsewhere.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import Field, model_validator
from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.db import Base, StrictTenantMixin, TimestampMixin


class CategoryTable(Base, StrictTenantMixin, TimestampMixin):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)


class SubcategoryTable(Base, StrictTenantMixin, TimestampMixin):
    __tablename__ = "subcategories"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)


class ProductTable(Base, StrictTenantMixin, TimestampMixin):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    category_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    subcategory_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("subcategories.id", ondelete="SET NULL"), nullable=True
    )


class OrderTable(Base, StrictTenantMixin, TimestampMixin):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")


# Request / response models


class CategoryCreate(BillingBaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255)


class SubcategoryCreate(BillingBaseModel):
    category_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255)


class ProductCreate(BillingBaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(Decimal("0"), ge=0)
    category_id: str | None = None
    subcategory_id: str | None = None


class ProductUpdate(BillingBaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    category_id: str | None = None
    subcategory_id: str | None = None

    @model_validator(mode="after")
    def _name_and_price_not_null(self) -> "ProductUpdate":
        """``null`` detaches a category or subcategory but cannot clear name or price."""
        for field in ("name", "price"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class OrderCreate(BillingBaseModel):
    customer_name: str = Field(min_length=1, max_length=255)
    total: Decimal = Field(Decimal("0"), ge=0)


class Category(BillingBaseModel):
    id: str
    tenant_id: str
    name: str
    slug: str
    created_at: datetime | None = None


class Subcategory(BillingBaseModel):
    id: str
    tenant_id: str
    category_id: str
    name: str
    slug: str
    created_at: datetime | None = None


class Product(BillingBaseModel):
    id: str
    tenant_id: str
    name: str
    price: Decimal
    category_id: str | None = None
    subcategory_id: str | None = None
    created_at: datetime | None = None


class Order(BillingBaseModel):
    id: str
    tenant_id: str
    customer_name: str
    total: Decimal
    status: str
    created_at: datetime | None = None


__all__ = [
    "CategoryTable",
    "SubcategoryTable",
    "ProductTable",
    "OrderTable",
    "CategoryCreate",
    "SubcategoryCreate",
    "ProductCreate",
    "ProductUpdate",
    "OrderCreate",
    "Category",
    "Subcategory",
    "Product",
    "Order",
]
