"""Tenant settings router."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.auth.core import UserInfo, require_platform_admin
from fleeting.platform.billing.dependencies import (
    TenantId,
    get_entitlement_service,
    get_usage_counter,
)
from fleeting.platform.billing.entitlements.service import EntitlementService
from fleeting.platform.billing.usage.service import UsageCounter
from fleeting.platform.db import get_async_session
from fleeting.platform.tenant.models import CustomDomainRequest, Tenant
from fleeting.platform.tenant.service import TenantService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/tenant")


def get_tenant_service(db: Annotated[AsyncSession, Depends(get_async_session)]) -> TenantService:
    return TenantService(db)


Tenants = Annotated[TenantService, Depends(get_tenant_service)]


@router.get("", response_model=Tenant)
async def get_tenant(tenant_id: TenantId, tenants: Tenants) -> Tenant:
    tenant = await tenants.ensure(tenant_id)
    await tenants.db.commit()
    return tenant


@router.put("/domain", response_model=Tenant)
async def set_custom_domain(
    data: CustomDomainRequest,
    tenant_id: TenantId,
    tenants: Tenants,
    entitlements: Annotated[EntitlementService, Depends(get_entitlement_service)],
) -> Tenant:
    """Attach a custom domain. Requires a plan with the custom domain feature."""
    await entitlements.require_feature(tenant_id, "custom_domain")
    return await tenants.set_custom_domain(tenant_id, data.domain)


@router.post("/usage/reconcile", response_model=dict[str, list[int]])
async def reconcile_usage(
    tenant_id: TenantId,
    _: Annotated[UserInfo, Depends(require_platform_admin)],
    usage: Annotated[UsageCounter, Depends(get_usage_counter)],
    entitlements: Annotated[EntitlementService, Depends(get_entitlement_service)],
) -> dict[str, list[int]]:
    """Recount usage from the resource tables. Returns drifted kinds as [counted, actual]."""
    async with entitlements.locks.hold(tenant_id):
        drift = await usage.reconcile(tenant_id)
    return {kind: list(values) for kind, values in drift.items()}


__all__ = ["router"]
