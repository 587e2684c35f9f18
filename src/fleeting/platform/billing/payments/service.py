"""
Payment intent service.

Creates and settles intents. Applying the unlocked lifecycle move is the
subscription lifecycle's job (``SubscriptionLifecycle.confirm_payment``).
"""

from datetime import datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.exceptions import PaymentNotFound, PaymentStateError
from fleeting.platform.billing.models import generate_id, utcnow
from fleeting.platform.billing.payments.models import (
    PaymentAction,
    PaymentIntent,
    PaymentIntentTable,
    PaymentStatus,
)
from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)


class PaymentService:
    """Payment intents for paid plan changes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_intent(
        self, tenant_id: str, plan: Plan, action: PaymentAction
    ) -> PaymentIntent:
        """Open a PENDING intent, cancelling any earlier pending one for the tenant.

        Flushes only; the caller commits.
        """
        await self.db.execute(
            update(PaymentIntentTable)
            .where(
                PaymentIntentTable.tenant_id == tenant_id,
                PaymentIntentTable.status == PaymentStatus.PENDING.value,
            )
            .values(status=PaymentStatus.CANCELLED.value, settled_at=utcnow())
        )
        row = PaymentIntentTable(
            id=generate_id("pay"),
            tenant_id=tenant_id,
            plan_id=plan.id,
            action=action.value,
            amount=plan.price,
            currency=plan.currency,
            status=PaymentStatus.PENDING.value,
            provider=settings.billing.payment_provider,
        )
        self.db.add(row)
        await self.db.flush()

        logger.info(
            "payment.intent_created",
            tenant_id=tenant_id,
            payment_id=row.id,
            plan_id=plan.id,
            action=action.value,
            amount=str(plan.price),
        )
        return PaymentIntent.model_validate(row)

    async def get(self, tenant_id: str, payment_id: str) -> PaymentIntent:
        row = await self.db.get(PaymentIntentTable, payment_id)
        if row is None or row.tenant_id != tenant_id:
            raise PaymentNotFound(f"Payment {payment_id} not found", payment_id=payment_id)
        return PaymentIntent.model_validate(row)

    async def get_any(self, payment_id: str) -> PaymentIntent:
        """Look up an intent without tenant scoping (operator and webhook paths)."""
        row = await self.db.get(PaymentIntentTable, payment_id)
        if row is None:
            raise PaymentNotFound(f"Payment {payment_id} not found", payment_id=payment_id)
        return PaymentIntent.model_validate(row)

    async def latest_pending(self, tenant_id: str) -> PaymentIntent | None:
        result = await self.db.execute(
            select(PaymentIntentTable)
            .where(
                PaymentIntentTable.tenant_id == tenant_id,
                PaymentIntentTable.status == PaymentStatus.PENDING.value,
            )
            .order_by(PaymentIntentTable.created_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return PaymentIntent.model_validate(row) if row else None

    async def history(self, tenant_id: str, limit: int = 50) -> list[PaymentIntent]:
        stmt = (
            select(PaymentIntentTable)
            .where(PaymentIntentTable.tenant_id == tenant_id)
            .order_by(PaymentIntentTable.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [PaymentIntent.model_validate(row) for row in result.scalars().all()]

    async def settle(
        self,
        payment_id: str,
        status: PaymentStatus,
        transaction_id: str | None = None,
        now: datetime | None = None,
    ) -> PaymentIntent:
        """Move a PENDING intent to a final status. Flushes only; the caller commits.

        Raises:
            PaymentStateError: If the intent is already settled
        """
        result = await self.db.execute(
            select(PaymentIntentTable)
            .where(PaymentIntentTable.id == payment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise PaymentNotFound(f"Payment {payment_id} not found", payment_id=payment_id)
        if row.status != PaymentStatus.PENDING.value:
            raise PaymentStateError(payment_id, row.status)

        row.status = status.value
        row.settled_at = now or utcnow()
        if transaction_id:
            row.transaction_id = transaction_id
        await self.db.flush()

        logger.info(
            "payment.settled",
            tenant_id=row.tenant_id,
            payment_id=payment_id,
            status=status.value,
        )
        return PaymentIntent.model_validate(row)


__all__ = ["PaymentService"]
