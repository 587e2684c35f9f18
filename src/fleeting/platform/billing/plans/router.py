"""
Plan catalog router.

The active catalog is public (pricing page). Everything else is for
platform operators.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status

from fleeting.platform.auth.core import UserInfo, require_platform_admin
from fleeting.platform.billing.dependencies import get_plan_catalog
from fleeting.platform.billing.plans.models import (
    Plan,
    PlanCreateRequest,
    PlanUpdateRequest,
    SeedPlansResponse,
)
from fleeting.platform.billing.plans.service import PlanCatalog

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/plans")

AdminUser = Annotated[UserInfo, Depends(require_platform_admin)]
Catalog = Annotated[PlanCatalog, Depends(get_plan_catalog)]


@router.get("", response_model=list[Plan])
async def list_active_plans(catalog: Catalog) -> list[Plan]:
    """Plans available for sign-up."""
    return await catalog.list_active()


@router.get("/admin/all", response_model=list[Plan])
async def list_all_plans(_: AdminUser, catalog: Catalog) -> list[Plan]:
    """Every plan, including deactivated ones."""
    return await catalog.list_all()


@router.post("/seed", response_model=SeedPlansResponse)
async def seed_plans(_: AdminUser, catalog: Catalog) -> SeedPlansResponse:
    """Install the default plan set. Safe to call repeatedly."""
    plans, created = await catalog.seed_defaults()
    message = f"Created {len(created)} plan(s)" if created else "Default plans already exist"
    return SeedPlansResponse(message=message, created=created, plans=plans)


@router.get("/{plan_id}", response_model=Plan)
async def get_plan(plan_id: str, catalog: Catalog) -> Plan:
    return await catalog.get(plan_id)


@router.post("", response_model=Plan, status_code=status.HTTP_201_CREATED)
async def create_plan(data: PlanCreateRequest, admin: AdminUser, catalog: Catalog) -> Plan:
    return await catalog.create(data, user_id=admin.user_id)


@router.patch("/{plan_id}", response_model=Plan)
async def update_plan(
    plan_id: str, data: PlanUpdateRequest, admin: AdminUser, catalog: Catalog
) -> Plan:
    """Partial update. Quota changes apply to every subscriber at next evaluation."""
    return await catalog.update(plan_id, data, user_id=admin.user_id)


@router.post("/{plan_id}/deactivate", response_model=Plan)
async def deactivate_plan(plan_id: str, admin: AdminUser, catalog: Catalog) -> Plan:
    """Hide a plan from new sign-ups. Existing subscribers keep it."""
    return await catalog.deactivate(plan_id, user_id=admin.user_id)


@router.post("/{plan_id}/activate", response_model=Plan)
async def activate_plan(plan_id: str, admin: AdminUser, catalog: Catalog) -> Plan:
    return await catalog.activate(plan_id, user_id=admin.user_id)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(plan_id: str, admin: AdminUser, catalog: Catalog) -> None:
    """Delete a plan no subscription references (409 otherwise; deactivate instead)."""
    await catalog.delete(plan_id, user_id=admin.user_id)


__all__ = ["router"]
