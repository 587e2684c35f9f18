"""Create plan, subscription, usage, payment, tenant and storefront tables.

Revision ID: 0001_entitlement_tables
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_entitlement_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _tenant_id() -> sa.Column:
    return sa.Column("tenant_id", sa.String(255), nullable=False, index=True)


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "plans",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("interval", sa.String(10), nullable=False),
        sa.Column("trial_days", sa.Integer(), nullable=False),
        sa.Column("max_products", sa.Integer(), nullable=False),
        sa.Column("max_categories", sa.Integer(), nullable=False),
        sa.Column("max_subcategories_per_category", sa.Integer(), nullable=False),
        sa.Column("max_orders", sa.Integer(), nullable=False),
        sa.Column("custom_domain", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_plans_price_non_negative"),
        sa.CheckConstraint("trial_days >= 0", name="ck_plans_trial_days_non_negative"),
        sa.CheckConstraint("max_products >= 0", name="ck_plans_max_products_non_negative"),
        sa.CheckConstraint("max_categories >= 0", name="ck_plans_max_categories_non_negative"),
        sa.CheckConstraint(
            "max_subcategories_per_category >= 0",
            name="ck_plans_max_subcategories_non_negative",
        ),
        sa.CheckConstraint("max_orders >= 0", name="ck_plans_max_orders_non_negative"),
    )

    op.create_table(
        "tenants",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("has_used_trial", sa.Boolean(), nullable=False),
        sa.Column("custom_domain", sa.String(255), nullable=True, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "tenant_notifications",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, index=True),
        *_timestamps(),
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("plan_id", sa.String(50), sa.ForeignKey("plans.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("trial_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("pending_plan_id", sa.String(50), sa.ForeignKey("plans.id"), nullable=True),
        sa.Column("pending_change_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_tenant_current", "subscriptions", ["tenant_id", "is_current"])
    op.create_index("ix_subscriptions_end_date", "subscriptions", ["end_date"])

    op.create_table(
        "subscription_events",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("subscription_id", sa.String(50), nullable=False, index=True),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("event_data", sa.JSON(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "usage_counters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_id(),
        sa.Column("resource_kind", sa.String(20), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "resource_kind", name="uq_usage_counters_tenant_kind"),
    )

    op.create_table(
        "subcategory_counters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_id(),
        sa.Column("category_id", sa.String(50), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "category_id", name="uq_subcategory_counters_category"),
    )

    op.create_table(
        "payment_intents",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("plan_id", sa.String(50), sa.ForeignKey("plans.id"), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "subcategories",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column(
            "category_id",
            sa.String(50),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column(
            "category_id",
            sa.String(50),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "subcategory_id",
            sa.String(50),
            sa.ForeignKey("subcategories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.String(50), primary_key=True),
        _tenant_id(),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("total", sa.Numeric(15, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop all tables in dependency order."""
    for table in (
        "orders",
        "products",
        "subcategories",
        "categories",
        "payment_intents",
        "subcategory_counters",
        "usage_counters",
        "subscription_events",
        "subscriptions",
        "tenant_notifications",
        "tenants",
        "plans",
    ):
        op.drop_table(table)
