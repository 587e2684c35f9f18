"""Entitlement API response schemas."""

from fleeting.platform.auth.core import UserInfo
from fleeting.platform.billing.access.models import AccessDecision
from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.billing.subscriptions.models import Subscription, SubscriptionWithPlan
from fleeting.platform.billing.usage.models import UsageSnapshot
from fleeting.platform.tenant.models import Tenant


class EntitlementState(BillingBaseModel):
    """Everything the evaluator needed for one decision."""

    subscription: Subscription | None = None
    plan: Plan | None = None
    pending_plan: Plan | None = None
    usage: UsageSnapshot
    access: AccessDecision

    def subscription_with_plan(self) -> SubscriptionWithPlan | None:
        if self.subscription is None or self.plan is None:
            return None
        return SubscriptionWithPlan(
            **self.subscription.model_dump(),
            plan=self.plan,
            pending_plan=self.pending_plan,
        )


class SessionBundle(BillingBaseModel):
    """Single read that drives all gating UI after sign-in."""

    user: UserInfo
    tenant: Tenant
    subscription: SubscriptionWithPlan | None = None
    access: AccessDecision
    usage: UsageSnapshot
    unread_notifications: int = 0


__all__ = ["EntitlementState", "SessionBundle"]
