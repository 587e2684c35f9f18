"""
Payment intent models.

The engine does not talk to a gateway. A paid plan change creates a PENDING
intent; an operator or the provider webhook later reports a boolean outcome
and the lifecycle applies the change on success.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import Field
from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.billing.subscriptions.models import Subscription
from fleeting.platform.db import Base, StrictTenantMixin, TimestampMixin


class PaymentAction(str, Enum):
    """Lifecycle move a payment unlocks."""

    SELECT_PLAN = "SELECT_PLAN"
    UPGRADE = "UPGRADE"
    RENEW = "RENEW"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentIntentTable(Base, StrictTenantMixin, TimestampMixin):
    """SQLAlchemy table for payment intents."""

    __tablename__ = "payment_intents"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    plan_id: Mapped[str] = mapped_column(String(50), ForeignKey("plans.id"), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True
    )
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PaymentIntent(BillingBaseModel):
    """Payment intent domain model."""

    id: str
    tenant_id: str
    plan_id: str
    action: PaymentAction
    amount: Decimal
    currency: str
    status: PaymentStatus
    provider: str
    transaction_id: str | None = None
    settled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ManualVerificationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ManualVerificationRequest(BillingBaseModel):
    """Operator decision on a pending payment."""

    payment_id: str = Field(min_length=1)
    action: ManualVerificationAction
    transaction_id: str | None = None


class PaymentWebhookPayload(BillingBaseModel):
    """Boolean outcome reported by the payment provider."""

    payment_id: str = Field(min_length=1)
    confirmed: bool
    transaction_id: str | None = None


class PaymentConfirmation(BillingBaseModel):
    """Settled payment and the resulting subscription."""

    payment: PaymentIntent
    subscription: Subscription | None = None


__all__ = [
    "PaymentAction",
    "PaymentStatus",
    "PaymentIntentTable",
    "PaymentIntent",
    "ManualVerificationAction",
    "ManualVerificationRequest",
    "PaymentWebhookPayload",
    "PaymentConfirmation",
]
