"""
Write-path guard.

Resource mutations run inside the guard so the quota check, the resource
insert and the counter increment happen under one tenant lock::

    async with guard.creating(tenant_id, ResourceKind.PRODUCT):
        db.add(product)
        await usage.record_create(tenant_id, ResourceKind.PRODUCT)
        await db.commit()
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.access.models import AccessDecision
from fleeting.platform.billing.entitlements.service import EntitlementService
from fleeting.platform.billing.exceptions import AccessDenied, QuotaExceeded
from fleeting.platform.billing.locking import TenantLockManager
from fleeting.platform.billing.models import utcnow
from fleeting.platform.billing.usage.models import ResourceKind

logger = structlog.get_logger(__name__)


class EntitlementGuard:
    """Authoritative entitlement check on the write path."""

    def __init__(self, db: AsyncSession, locks: TenantLockManager | None = None):
        self.db = db
        self.entitlements = EntitlementService(db, locks)
        self.locks = self.entitlements.locks

    @asynccontextmanager
    async def creating(
        self,
        tenant_id: str,
        kind: ResourceKind,
        category_id: str | None = None,
        now: datetime | None = None,
    ) -> AsyncIterator[AccessDecision]:
        """Hold the tenant lock and allow the block only if creation is permitted.

        Raises:
            AccessDenied: No active subscription, or lapsed into the grace period
            QuotaExceeded: No headroom for ``kind`` (per category for subcategories)
        """
        if kind == ResourceKind.SUBCATEGORY and not category_id:
            raise ValueError("Subcategory creation requires a category_id")

        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            state = await self.entitlements.load_state(tenant_id, now, kind, category_id)
            decision = state.access
            if not decision.can_create:
                self._reject(tenant_id, decision, state.usage.used_and_limit(kind, category_id))
            yield decision

    @asynccontextmanager
    async def modifying(
        self, tenant_id: str, action: str = "update", now: datetime | None = None
    ) -> AsyncIterator[AccessDecision]:
        """Hold the tenant lock and allow the block only if update/delete is permitted."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            state = await self.entitlements.load_state(tenant_id, now)
            decision = state.access
            allowed = decision.can_delete if action == "delete" else decision.can_update
            if not allowed:
                logger.info(
                    "entitlement.write_denied",
                    tenant_id=tenant_id,
                    action=action,
                    reason=decision.denial_reason,
                )
                raise AccessDenied(decision.message, context={"action": action})
            yield decision

    @staticmethod
    def _reject(tenant_id: str, decision: AccessDecision, used_limit: tuple[int, int]) -> None:
        kind = decision.resource_kind
        kind_value = kind.value if kind else None
        logger.info(
            "entitlement.create_denied",
            tenant_id=tenant_id,
            resource_kind=kind_value,
            category_id=decision.category_id,
            reason=decision.denial_reason,
        )
        if decision.quota_exceeded and kind is not None:
            used, limit = used_limit
            raise QuotaExceeded(
                decision.message,
                resource_kind=kind.value,
                used=used,
                limit=limit,
                category_id=decision.category_id,
            )
        raise AccessDenied(
            decision.message,
            context={
                "resource_kind": kind_value,
                "in_grace_period": decision.is_in_grace_period,
            },
        )


__all__ = ["EntitlementGuard"]
