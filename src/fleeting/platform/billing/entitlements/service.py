"""
Entitlement service.

Glue between stored state and the pure evaluator: loads the tenant's
subscription (with lazy expiry applied), the effective plan and live usage,
then asks ``evaluate`` for the verdict.
"""

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.auth.core import UserInfo
from fleeting.platform.billing.access.evaluator import evaluate
from fleeting.platform.billing.access.models import AccessDecision
from fleeting.platform.billing.entitlements.schemas import EntitlementState, SessionBundle
from fleeting.platform.billing.exceptions import AccessDenied
from fleeting.platform.billing.locking import TenantLockManager, get_lock_manager
from fleeting.platform.billing.models import utcnow
from fleeting.platform.billing.plans.service import PlanCatalog
from fleeting.platform.billing.subscriptions.models import Subscription
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.billing.usage.models import ResourceKind
from fleeting.platform.billing.usage.service import UsageCounter
from fleeting.platform.settings import settings
from fleeting.platform.tenant.service import TenantService

logger = structlog.get_logger(__name__)

FEATURES = ("custom_domain",)


class EntitlementService:
    """Answer "may this tenant do X right now?"."""

    def __init__(self, db: AsyncSession, locks: TenantLockManager | None = None):
        self.db = db
        self.locks = locks or get_lock_manager()
        self.lifecycle = SubscriptionLifecycle(db, self.locks)
        self.catalog = PlanCatalog(db)
        self.usage = UsageCounter(db)
        self.tenants = TenantService(db)

    async def load_state(
        self,
        tenant_id: str,
        now: datetime,
        resource_kind: ResourceKind | None = None,
        category_id: str | None = None,
    ) -> EntitlementState:
        """Load and evaluate. The caller holds the tenant lock."""
        row = await self.lifecycle.load_current(tenant_id, now)
        subscription = Subscription.from_row(row) if row else None

        plan = pending_plan = None
        if subscription is not None:
            # Quotas are read live from the plan, never snapshotted
            plan = await self.catalog.get(subscription.plan_id)
            if subscription.pending_plan_id:
                pending_plan = await self.catalog.get(subscription.pending_plan_id)

        usage = await self.usage.snapshot(tenant_id, plan)
        access = evaluate(
            subscription,
            usage,
            now,
            resource_kind=resource_kind,
            category_id=category_id,
            grace_days=settings.billing.grace_period_days,
        )
        return EntitlementState(
            subscription=subscription,
            plan=plan,
            pending_plan=pending_plan,
            usage=usage,
            access=access,
        )

    async def current_state(self, tenant_id: str, now: datetime | None = None) -> EntitlementState:
        """Evaluate under the tenant lock, persisting any lazy expiry."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            state = await self.load_state(tenant_id, now)
            await self.db.commit()
        return state

    async def session(
        self, user: UserInfo, tenant_id: str, now: datetime | None = None
    ) -> SessionBundle:
        """Full bundle {user, tenant, subscription, access, usage, unread notifications}."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            tenant = await self.tenants.ensure(tenant_id)
            state = await self.load_state(tenant_id, now)
            unread = await self.tenants.unread_notifications(tenant_id)
            await self.db.commit()

        return SessionBundle(
            user=user,
            tenant=tenant,
            subscription=state.subscription_with_plan(),
            access=state.access,
            usage=state.usage,
            unread_notifications=unread,
        )

    async def check(
        self,
        tenant_id: str,
        resource_kind: ResourceKind | None = None,
        category_id: str | None = None,
        now: datetime | None = None,
    ) -> AccessDecision:
        """Advisory decision (nothing is reserved)."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            state = await self.load_state(tenant_id, now, resource_kind, category_id)
        return state.access

    async def require_feature(
        self, tenant_id: str, feature: str, now: datetime | None = None
    ) -> AccessDecision:
        """Raise ``AccessDenied`` unless the effective plan includes ``feature``."""
        if feature not in FEATURES:
            raise ValueError(f"Unknown plan feature: {feature}")

        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            state = await self.load_state(tenant_id, now)

        access = state.access
        if not access.can_update:
            raise AccessDenied(access.message, context={"feature": feature})
        if state.plan is None or not getattr(state.plan, feature):
            plan_name = state.plan.name if state.plan else None
            logger.info(
                "entitlement.feature_denied", tenant_id=tenant_id, feature=feature, plan=plan_name
            )
            raise AccessDenied(
                f"Your plan does not include {feature.replace('_', ' ')}",
                context={"feature": feature, "plan": plan_name},
            )
        return access


__all__ = ["EntitlementService", "FEATURES"]
