"""
Plan catalog service.

Operators create and edit plans; tenants read the sellable subset. Quota edits
are read live by the evaluator, so they apply to every subscriber at the next
evaluation.
"""

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.exceptions import PlanInUse, PlanNotFound
from fleeting.platform.billing.models import generate_id
from fleeting.platform.billing.plans.models import (
    BillingInterval,
    Plan,
    PlanCreateRequest,
    PlanTable,
    PlanUpdateRequest,
)
from fleeting.platform.billing.subscriptions.models import SubscriptionTable
from fleeting.platform.logging import audit
from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)


DEFAULT_PLANS: list[dict[str, Any]] = [
    {
        "name": "Free Trial",
        "price": Decimal("0"),
        "interval": BillingInterval.MONTHLY,
        "trial_days": 14,
        "max_products": 10,
        "max_categories": 3,
        "max_subcategories_per_category": 3,
        "max_orders": 50,
        "custom_domain": False,
    },
    {
        "name": "Starter",
        "price": Decimal("499"),
        "interval": BillingInterval.MONTHLY,
        "trial_days": 0,
        "max_products": 100,
        "max_categories": 10,
        "max_subcategories_per_category": 5,
        "max_orders": 500,
        "custom_domain": False,
    },
    {
        "name": "Growth",
        "price": Decimal("1499"),
        "interval": BillingInterval.MONTHLY,
        "trial_days": 0,
        "max_products": 1000,
        "max_categories": 50,
        "max_subcategories_per_category": 20,
        "max_orders": 5000,
        "custom_domain": True,
    },
]


class PlanCatalog:
    """Read and manage the plan catalog."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> list[Plan]:
        """Plans offered on the public pricing page."""
        stmt = (
            select(PlanTable)
            .where(PlanTable.is_active.is_(True))
            .order_by(PlanTable.price, PlanTable.name)
        )
        result = await self.db.execute(stmt)
        return [Plan.model_validate(row) for row in result.scalars().all()]

    async def list_all(self) -> list[Plan]:
        """Every plan, including deactivated ones (operator view)."""
        stmt = select(PlanTable).order_by(PlanTable.price, PlanTable.name)
        result = await self.db.execute(stmt)
        return [Plan.model_validate(row) for row in result.scalars().all()]

    async def get(self, plan_id: str) -> Plan:
        return Plan.model_validate(await self._get_row(plan_id))

    async def get_sellable(self, plan_id: str) -> Plan:
        """Get a plan that may be chosen for a new or changed subscription."""
        plan = await self.get(plan_id)
        if not plan.is_active:
            raise PlanNotFound(f"Plan {plan.name} is no longer available", plan_id=plan_id)
        return plan

    async def find_by_name(self, name: str) -> Plan | None:
        result = await self.db.execute(select(PlanTable).where(PlanTable.name == name))
        row = result.scalar_one_or_none()
        return Plan.model_validate(row) if row else None

    async def create(self, data: PlanCreateRequest, user_id: str | None = None) -> Plan:
        row = PlanTable(
            id=generate_id("plan"),
            name=data.name,
            price=data.price,
            currency=data.currency or settings.billing.default_currency,
            interval=data.interval.value,
            trial_days=data.trial_days,
            max_products=data.max_products,
            max_categories=data.max_categories,
            max_subcategories_per_category=data.max_subcategories_per_category,
            max_orders=data.max_orders,
            custom_domain=data.custom_domain,
            is_active=True,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)

        audit(
            "plan.created",
            tenant_id=None,
            actor_id=user_id,
            resource="plan",
            resource_id=row.id,
            plan_name=row.name,
        )
        return Plan.model_validate(row)

    async def update(
        self, plan_id: str, data: PlanUpdateRequest, user_id: str | None = None
    ) -> Plan:
        row = await self._get_row(plan_id)
        changes = data.model_dump(exclude_unset=True, by_alias=False)
        for field, value in changes.items():
            if isinstance(value, BillingInterval):
                value = value.value
            setattr(row, field, value)
        await self.db.commit()
        await self.db.refresh(row)

        audit(
            "plan.updated",
            tenant_id=None,
            actor_id=user_id,
            resource="plan",
            resource_id=plan_id,
            changed_fields=sorted(changes),
        )
        return Plan.model_validate(row)

    async def deactivate(self, plan_id: str, user_id: str | None = None) -> Plan:
        """Hide a plan from new sign-ups. Existing subscribers keep it."""
        return await self._set_active(plan_id, False, user_id)

    async def activate(self, plan_id: str, user_id: str | None = None) -> Plan:
        return await self._set_active(plan_id, True, user_id)

    async def delete(self, plan_id: str, user_id: str | None = None) -> None:
        """Hard-delete a plan no subscription has ever referenced."""
        row = await self._get_row(plan_id)
        count = await self.db.scalar(
            select(func.count())
            .select_from(SubscriptionTable)
            .where(
                (SubscriptionTable.plan_id == plan_id)
                | (SubscriptionTable.pending_plan_id == plan_id)
            )
        )
        if count:
            raise PlanInUse(
                f"Plan {row.name} is referenced by {count} subscription(s) and cannot be deleted",
                plan_id=plan_id,
                subscription_count=int(count),
            )
        await self.db.delete(row)
        await self.db.commit()

        audit(
            "plan.deleted", tenant_id=None, actor_id=user_id, resource="plan", resource_id=plan_id
        )

    async def seed_defaults(self) -> tuple[list[Plan], list[str]]:
        """Install the starter plan set. Plans that already exist are left untouched.

        Returns:
            All default plans, and the names of the ones created by this call.
        """
        created: list[str] = []
        plans: list[Plan] = []
        for definition in DEFAULT_PLANS:
            existing = await self.find_by_name(definition["name"])
            if existing is not None:
                plans.append(existing)
                continue
            plan = await self.create(PlanCreateRequest(**definition))
            created.append(plan.name)
            plans.append(plan)

        logger.info("plans.seeded", created=created, total=len(plans))
        return plans, created

    async def _set_active(self, plan_id: str, active: bool, user_id: str | None) -> Plan:
        row = await self._get_row(plan_id)
        row.is_active = active
        await self.db.commit()
        await self.db.refresh(row)

        audit(
            "plan.activated" if active else "plan.deactivated",
            tenant_id=None,
            actor_id=user_id,
            resource="plan",
            resource_id=plan_id,
        )
        return Plan.model_validate(row)

    async def _get_row(self, plan_id: str) -> PlanTable:
        row = await self.db.get(PlanTable, plan_id)
        if row is None:
            raise PlanNotFound(f"Plan {plan_id} not found", plan_id=plan_id)
        return row


__all__ = ["PlanCatalog", "DEFAULT_PLANS"]
