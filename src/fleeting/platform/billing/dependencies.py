"""
Billing module dependencies and common utilities.

Tenant context resolution and service factories shared by the billing,
commerce and tenant routers.
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.auth.core import UserInfo, get_current_user
from fleeting.platform.billing.entitlements.guard import EntitlementGuard
from fleeting.platform.billing.entitlements.service import EntitlementService
from fleeting.platform.billing.locking import TenantLockManager, get_lock_manager
from fleeting.platform.billing.payments.service import PaymentService
from fleeting.platform.billing.plans.service import PlanCatalog
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.billing.usage.service import UsageCounter
from fleeting.platform.db import get_async_session
from fleeting.platform.settings import settings


async def get_tenant_id(
    request: Request,
    current_user: Annotated[UserInfo, Depends(get_current_user)],
) -> str:
    """
    Get tenant ID for the request.

    Store owners are bound to the tenant in their token. Platform admins
    name the tenant they act on with the X-Tenant-ID header or the
    tenant_id query parameter.

    Raises:
        HTTPException: 403 when a store owner targets another tenant,
            400 when no tenant can be determined
    """
    requested = request.headers.get(settings.tenant.tenant_header_name) or request.query_params.get(
        settings.tenant.tenant_query_param
    )

    if current_user.tenant_id:
        if requested and requested != current_user.tenant_id and not current_user.is_platform_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access to another tenant is not allowed",
            )
        tenant_id = requested if current_user.is_platform_admin and requested else current_user.tenant_id
    elif current_user.is_platform_admin and requested:
        tenant_id = requested
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tenant context not found. Ensure X-Tenant-ID header or tenant_id query param is provided.",
        )

    structlog.contextvars.bind_contextvars(tenant_id=tenant_id)
    return tenant_id


def get_plan_catalog(db: Annotated[AsyncSession, Depends(get_async_session)]) -> PlanCatalog:
    return PlanCatalog(db)


def get_lifecycle(
    db: Annotated[AsyncSession, Depends(get_async_session)],
    locks: Annotated[TenantLockManager, Depends(get_lock_manager)],
) -> SubscriptionLifecycle:
    return SubscriptionLifecycle(db, locks)


def get_entitlement_service(
    db: Annotated[AsyncSession, Depends(get_async_session)],
    locks: Annotated[TenantLockManager, Depends(get_lock_manager)],
) -> EntitlementService:
    return EntitlementService(db, locks)


def get_entitlement_guard(
    db: Annotated[AsyncSession, Depends(get_async_session)],
    locks: Annotated[TenantLockManager, Depends(get_lock_manager)],
) -> EntitlementGuard:
    return EntitlementGuard(db, locks)


def get_payment_service(db: Annotated[AsyncSession, Depends(get_async_session)]) -> PaymentService:
    return PaymentService(db)


def get_usage_counter(db: Annotated[AsyncSession, Depends(get_async_session)]) -> UsageCounter:
    return UsageCounter(db)


TenantId = Annotated[str, Depends(get_tenant_id)]
CurrentUser = Annotated[UserInfo, Depends(get_current_user)]


__all__ = [
    "get_tenant_id",
    "get_plan_catalog",
    "get_lifecycle",
    "get_entitlement_service",
    "get_entitlement_guard",
    "get_payment_service",
    "get_usage_counter",
    "TenantId",
    "CurrentUser",
]
