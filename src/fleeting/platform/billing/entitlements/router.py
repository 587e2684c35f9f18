"""
Entitlement session router.

``GET /session`` is the single read a client makes after sign-in to drive
all gating UI. ``GET /auth/validate-session`` serves the same bundle for
older dashboard builds.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from fleeting.platform.billing.dependencies import (
    CurrentUser,
    TenantId,
    get_entitlement_service,
)
from fleeting.platform.billing.entitlements.schemas import SessionBundle
from fleeting.platform.billing.entitlements.service import EntitlementService

router = APIRouter()

Entitlements = Annotated[EntitlementService, Depends(get_entitlement_service)]


@router.get("/session", response_model=SessionBundle)
async def get_session(
    user: CurrentUser, tenant_id: TenantId, entitlements: Entitlements
) -> SessionBundle:
    return await entitlements.session(user, tenant_id)


@router.get("/auth/validate-session", response_model=SessionBundle)
async def validate_session(
    user: CurrentUser, tenant_id: TenantId, entitlements: Entitlements
) -> SessionBundle:
    return await entitlements.session(user, tenant_id)


__all__ = ["router"]
