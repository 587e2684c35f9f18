"""
Plan catalog models.

A plan is a priced tier defining quota ceilings and feature flags. Plans are
platform-owned reference data shared by all tenants; they are soft-deactivated
rather than deleted while any subscription references them.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from pydantic import Field, field_validator, model_validator
from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.db import Base, TimestampMixin


class BillingInterval(str, Enum):
    """Plan billing interval."""

    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    def period_length(self) -> timedelta:
        """Length of one billing period."""
        if self == BillingInterval.YEARLY:
            return timedelta(days=365)
        return timedelta(days=30)


class PlanTable(Base, TimestampMixin):
    """SQLAlchemy table for subscription plans."""

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    interval: Mapped[str] = mapped_column(
        String(10), nullable=False, default=BillingInterval.MONTHLY.value
    )
    trial_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Quotas
    max_products: Mapped[int] = mapped_column(Integer, nullable=False)
    max_categories: Mapped[int] = mapped_column(Integer, nullable=False)
    max_subcategories_per_category: Mapped[int] = mapped_column(Integer, nullable=False)
    max_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Feature flags
    custom_domain: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Sellable
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_plans_price_non_negative"),
        CheckConstraint("trial_days >= 0", name="ck_plans_trial_days_non_negative"),
        CheckConstraint("max_products >= 0", name="ck_plans_max_products_non_negative"),
        CheckConstraint("max_categories >= 0", name="ck_plans_max_categories_non_negative"),
        CheckConstraint(
            "max_subcategories_per_category >= 0",
            name="ck_plans_max_subcategories_non_negative",
        ),
        CheckConstraint("max_orders >= 0", name="ck_plans_max_orders_non_negative"),
    )


class Plan(BillingBaseModel):
    """Plan domain model."""

    id: str
    name: str
    price: Decimal = Field(ge=0)
    currency: str
    interval: BillingInterval = BillingInterval.MONTHLY
    trial_days: int = Field(0, ge=0)
    max_products: int = Field(ge=0)
    max_categories: int = Field(ge=0)
    max_subcategories_per_category: int = Field(ge=0)
    max_orders: int = Field(0, ge=0)
    custom_domain: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_free(self) -> bool:
        return self.price == 0

    def period_length(self) -> timedelta:
        return self.interval.period_length()


class PlanCreateRequest(BillingBaseModel):
    """Operator request to create a plan."""

    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    interval: BillingInterval = BillingInterval.MONTHLY
    trial_days: int = Field(0, ge=0)
    max_products: int = Field(ge=0)
    max_categories: int = Field(ge=0)
    max_subcategories_per_category: int = Field(ge=0)
    max_orders: int = Field(0, ge=0)
    custom_domain: bool = False

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class PlanUpdateRequest(BillingBaseModel):
    """Partial plan update. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    price: Decimal | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    interval: BillingInterval | None = None
    trial_days: int | None = Field(None, ge=0)
    max_products: int | None = Field(None, ge=0)
    max_categories: int | None = Field(None, ge=0)
    max_subcategories_per_category: int | None = Field(None, ge=0)
    max_orders: int | None = Field(None, ge=0)
    custom_domain: bool | None = None
    is_active: bool | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return v.upper() if v else v

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> "PlanUpdateRequest":
        # Every plan column is NOT NULL; omit a field to leave it unchanged
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class SeedPlansResponse(BillingBaseModel):
    """Result of installing the default plan set."""

    message: str
    created: list[str]
    plans: list[Plan]


__all__ = [
    "BillingInterval",
    "PlanTable",
    "Plan",
    "PlanCreateRequest",
    "PlanUpdateRequest",
    "SeedPlansResponse",
]
