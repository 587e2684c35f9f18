"""
Access decision models.

An ``AccessDecision`` is recomputed on every evaluation and never stored.
"""

from enum import Enum

from pydantic import Field

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.billing.subscriptions.models import SubscriptionStatus
from fleeting.platform.billing.usage.models import ResourceKind


class DenialReason(str, Enum):
    """Why creation (or all access) was refused."""

    NO_SUBSCRIPTION = "NO_SUBSCRIPTION"
    EXPIRED = "EXPIRED"
    GRACE_PERIOD = "GRACE_PERIOD"
    QUOTA = "QUOTA"


class AccessDecision(BillingBaseModel):
    """Verdict for a tenant at one instant."""

    has_access: bool
    can_create: bool
    can_update: bool
    can_delete: bool
    is_in_grace_period: bool = False
    grace_period_days_remaining: int = Field(0, ge=0)
    days_remaining: int = Field(0, ge=0)
    message: str

    status: SubscriptionStatus | None = None
    resource_kind: ResourceKind | None = None
    category_id: str | None = None
    can_create_by_kind: dict[ResourceKind, bool] = Field(default_factory=dict)
    denial_reason: DenialReason | None = None

    @property
    def quota_exceeded(self) -> bool:
        return self.denial_reason == DenialReason.QUOTA


__all__ = ["AccessDecision", "DenialReason"]
