"""
Subscription lifecycle models.

A tenant has at most one *current* subscription row. Earlier rows are kept
with ``is_current = False`` for history and are never hard-deleted.

Deferred changes (downgrade) are modelled as two plan references: ``plan_id``
is the plan in effect now, ``pending_plan_id`` the plan that takes over at
``pending_change_at``.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import Field
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel, TenantScopedModel, ensure_aware
from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.db import Base, StrictTenantMixin, TimestampMixin


class SubscriptionStatus(str, Enum):
    """Subscription states."""

    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class SubscriptionEventType(str, Enum):
    """Lifecycle events written to the audit trail."""

    TRIAL_STARTED = "subscription.trial_started"
    ACTIVATED = "subscription.activated"
    UPGRADED = "subscription.upgraded"
    DOWNGRADE_SCHEDULED = "subscription.downgrade_scheduled"
    DOWNGRADE_APPLIED = "subscription.downgrade_applied"
    RENEWED = "subscription.renewed"
    CANCELLED = "subscription.cancelled"
    REACTIVATED = "subscription.reactivated"
    EXPIRED = "subscription.expired"
    PAYMENT_PENDING = "subscription.payment_pending"


class SubscriptionTable(Base, StrictTenantMixin, TimestampMixin):
    """SQLAlchemy table for tenant subscriptions."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    plan_id: Mapped[str] = mapped_column(String(50), ForeignKey("plans.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Current period
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # One current row per tenant; older rows are history
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Deferred plan change
    pending_plan_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("plans.id"), nullable=True
    )
    pending_change_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_subscriptions_tenant_current", "tenant_id", "is_current"),
        Index("ix_subscriptions_end_date", "end_date"),
    )


class SubscriptionEventTable(Base, StrictTenantMixin):
    """SQLAlchemy table for subscription events (audit trail)."""

    __tablename__ = "subscription_events"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    subscription_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    event_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Subscription(TenantScopedModel):
    """Subscription domain model."""

    id: str
    plan_id: str
    status: SubscriptionStatus
    start_date: datetime
    end_date: datetime
    trial_ends_at: datetime | None = None
    is_current: bool = True
    pending_plan_id: str | None = None
    pending_change_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_row(cls, row: SubscriptionTable) -> "Subscription":
        sub = cls.model_validate(row)
        # SQLite drops tzinfo on the way back
        sub.start_date = ensure_aware(sub.start_date)
        sub.end_date = ensure_aware(sub.end_date)
        if sub.trial_ends_at is not None:
            sub.trial_ends_at = ensure_aware(sub.trial_ends_at)
        if sub.pending_change_at is not None:
            sub.pending_change_at = ensure_aware(sub.pending_change_at)
        if sub.cancelled_at is not None:
            sub.cancelled_at = ensure_aware(sub.cancelled_at)
        return sub

    @property
    def period_end(self) -> datetime:
        """Instant the current period ends (trial end for trials)."""
        if self.status == SubscriptionStatus.TRIAL and self.trial_ends_at is not None:
            return self.trial_ends_at
        return self.end_date


class SubscriptionEvent(BillingBaseModel):
    """Audit trail entry."""

    id: str
    tenant_id: str
    subscription_id: str
    event_type: SubscriptionEventType
    event_data: dict[str, Any] = Field(default_factory=dict)
    user_id: str | None = None
    created_at: datetime


class SubscriptionWithPlan(Subscription):
    """Subscription together with its current and pending plans."""

    plan: Plan
    pending_plan: Plan | None = None


class PlanChangeRequest(BillingBaseModel):
    """Body for select-plan, upgrade and downgrade."""

    plan_id: str = Field(min_length=1)


class TrialActivationRequest(BillingBaseModel):
    """Optional body for activate-trial."""

    plan_id: str | None = None


class PlanChangeResult(BillingBaseModel):
    """Outcome of a lifecycle move.

    Either the change is applied (``subscription`` set, ``requires_payment``
    false) or a payment intent was opened and ``payment_id`` is the handle
    the client completes the payment with.
    """

    action: str
    plan_id: str
    plan_name: str
    amount: Decimal
    currency: str
    requires_payment: bool = False
    payment_id: str | None = None
    effective_at: datetime | None = None
    subscription: Subscription | None = None
    message: str


__all__ = [
    "SubscriptionStatus",
    "SubscriptionEventType",
    "SubscriptionTable",
    "SubscriptionEventTable",
    "Subscription",
    "SubscriptionEvent",
    "SubscriptionWithPlan",
    "PlanChangeRequest",
    "TrialActivationRequest",
    "PlanChangeResult",
]
