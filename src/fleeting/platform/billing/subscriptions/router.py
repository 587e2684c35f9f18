"""
Subscription lifecycle router.

Plan-change endpoints return either an applied change or
``requiresPayment`` with the payment handle.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Body, Depends

from fleeting.platform.billing.access.models import AccessDecision
from fleeting.platform.billing.dependencies import (
    CurrentUser,
    TenantId,
    get_entitlement_service,
    get_lifecycle,
)
from fleeting.platform.billing.entitlements.service import EntitlementService
from fleeting.platform.billing.exceptions import PaymentRequired, SubscriptionNotFound
from fleeting.platform.billing.subscriptions.models import (
    PlanChangeRequest,
    PlanChangeResult,
    SubscriptionEvent,
    SubscriptionWithPlan,
    TrialActivationRequest,
)
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.billing.usage.models import ResourceKind, UsageSnapshot

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/subscriptions")

Lifecycle = Annotated[SubscriptionLifecycle, Depends(get_lifecycle)]
Entitlements = Annotated[EntitlementService, Depends(get_entitlement_service)]


@router.get("/current", response_model=SubscriptionWithPlan)
async def get_current_subscription(
    tenant_id: TenantId, entitlements: Entitlements
) -> SubscriptionWithPlan:
    """Current subscription with its effective and pending plans.

    402 while a plan selection is waiting for payment, 404 with no subscription.
    """
    state = await entitlements.current_state(tenant_id)
    current = state.subscription_with_plan()
    if current is None:
        pending = await entitlements.lifecycle.payments.latest_pending(tenant_id)
        if pending is not None:
            raise PaymentRequired(
                "Plan selection is awaiting payment confirmation",
                payment_id=pending.id,
                amount=str(pending.amount),
                currency=pending.currency,
            )
        raise SubscriptionNotFound("No subscription for this store", tenant_id=tenant_id)
    return current


@router.get("/usage", response_model=UsageSnapshot)
async def get_usage(tenant_id: TenantId, entitlements: Entitlements) -> UsageSnapshot:
    state = await entitlements.current_state(tenant_id)
    return state.usage


@router.get("/access-status", response_model=AccessDecision)
async def get_access_status(
    tenant_id: TenantId,
    entitlements: Entitlements,
    resource_kind: ResourceKind | None = None,
    category_id: str | None = None,
) -> AccessDecision:
    """Advisory access decision, optionally for one resource kind."""
    return await entitlements.check(tenant_id, resource_kind, category_id)


@router.get("/history", response_model=list[SubscriptionEvent])
async def get_history(tenant_id: TenantId, lifecycle: Lifecycle) -> list[SubscriptionEvent]:
    """Lifecycle events, newest first."""
    return await lifecycle.events(tenant_id)


@router.post("/activate-trial", response_model=PlanChangeResult)
async def activate_trial(
    tenant_id: TenantId,
    user: CurrentUser,
    lifecycle: Lifecycle,
    data: Annotated[TrialActivationRequest | None, Body()] = None,
) -> PlanChangeResult:
    plan_id = data.plan_id if data else None
    return await lifecycle.activate_trial(tenant_id, plan_id=plan_id, user_id=user.user_id)


@router.post("/select-plan", response_model=PlanChangeResult)
async def select_plan(
    data: PlanChangeRequest, tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle
) -> PlanChangeResult:
    return await lifecycle.select_plan(tenant_id, data.plan_id, user_id=user.user_id)


@router.post("/upgrade", response_model=PlanChangeResult)
async def upgrade(
    data: PlanChangeRequest, tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle
) -> PlanChangeResult:
    return await lifecycle.upgrade(tenant_id, data.plan_id, user_id=user.user_id)


@router.post("/downgrade", response_model=PlanChangeResult)
async def downgrade(
    data: PlanChangeRequest, tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle
) -> PlanChangeResult:
    return await lifecycle.downgrade(tenant_id, data.plan_id, user_id=user.user_id)


@router.post("/renew", response_model=PlanChangeResult)
async def renew(tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle) -> PlanChangeResult:
    return await lifecycle.renew(tenant_id, user_id=user.user_id)


@router.post("/cancel", response_model=PlanChangeResult)
async def cancel(tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle) -> PlanChangeResult:
    return await lifecycle.cancel(tenant_id, user_id=user.user_id)


@router.post("/reactivate", response_model=PlanChangeResult)
async def reactivate(
    tenant_id: TenantId, user: CurrentUser, lifecycle: Lifecycle
) -> PlanChangeResult:
    return await lifecycle.reactivate(tenant_id, user_id=user.user_id)


__all__ = ["router"]
