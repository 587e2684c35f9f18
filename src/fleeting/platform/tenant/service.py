"""Tenant aggregate service."""

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.models import generate_id
from fleeting.platform.tenant.models import (
    Tenant,
    TenantNotification,
    TenantNotificationTable,
    TenantTable,
)

logger = structlog.get_logger(__name__)


class TenantService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def ensure(self, tenant_id: str, name: str | None = None) -> Tenant:
        """Return the tenant, creating the row on first sight."""
        return Tenant.model_validate(await self.get_row(tenant_id, name=name))

    async def get_row(
        self, tenant_id: str, name: str | None = None, for_update: bool = False
    ) -> TenantTable:
        stmt = select(TenantTable).where(TenantTable.id == tenant_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        if row is None:
            row = TenantTable(id=tenant_id, name=name or tenant_id)
            self.db.add(row)
            await self.db.flush()
            logger.info("tenant.created", tenant_id=tenant_id)
        return row

    async def set_custom_domain(self, tenant_id: str, domain: str) -> Tenant:
        row = await self.get_row(tenant_id)
        row.custom_domain = domain.lower()
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("tenant.custom_domain_set", tenant_id=tenant_id, domain=row.custom_domain)
        return Tenant.model_validate(row)

    async def notify(self, tenant_id: str, title: str, body: str = "") -> TenantNotification:
        """Add a dashboard notification. Flushes only; the caller commits."""
        row = TenantNotificationTable(
            id=generate_id("ntf"), tenant_id=tenant_id, title=title, body=body
        )
        self.db.add(row)
        await self.db.flush()
        return TenantNotification.model_validate(row)

    async def unread_notifications(self, tenant_id: str) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(TenantNotificationTable)
            .where(
                TenantNotificationTable.tenant_id == tenant_id,
                TenantNotificationTable.is_read.is_(False),
            )
        )
        return int(count or 0)


__all__ = ["TenantService"]
