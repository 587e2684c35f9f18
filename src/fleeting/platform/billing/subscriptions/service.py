"""
Subscription lifecycle service.

State machine per tenant::

    (none) --activate_trial--> TRIAL
    (none) | EXPIRED | CANCELLED(ended) --select_plan--> ACTIVE (or pending payment)
    TRIAL | ACTIVE --upgrade--> ACTIVE (immediate)
    ACTIVE --downgrade--> ACTIVE (new plan at period end)
    ACTIVE | EXPIRED --renew--> ACTIVE
    TRIAL | ACTIVE --cancel--> CANCELLED (access until period end)
    CANCELLED --reactivate--> ACTIVE (before period end)
    TRIAL | ACTIVE --(lazy, now > end)--> EXPIRED

Every move runs under the tenant's lock, applies lazy expiry first, writes a
subscription event and commits.
"""

from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.exceptions import (
    InvalidTransition,
    PlanNotFound,
    SubscriptionNotFound,
    TrialAlreadyUsed,
)
from fleeting.platform.billing.locking import TenantLockManager, get_lock_manager
from fleeting.platform.billing.models import ensure_aware, generate_id, utcnow
from fleeting.platform.billing.payments.models import (
    PaymentAction,
    PaymentConfirmation,
    PaymentIntent,
    PaymentStatus,
)
from fleeting.platform.billing.payments.service import PaymentService
from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.billing.plans.service import PlanCatalog
from fleeting.platform.billing.subscriptions.models import (
    PlanChangeResult,
    Subscription,
    SubscriptionEvent,
    SubscriptionEventTable,
    SubscriptionEventType,
    SubscriptionStatus,
    SubscriptionTable,
)
from fleeting.platform.logging import audit
from fleeting.platform.settings import settings
from fleeting.platform.tenant.service import TenantService

logger = structlog.get_logger(__name__)

NO_SUBSCRIPTION = "NONE"

_LIVE = (SubscriptionStatus.TRIAL.value, SubscriptionStatus.ACTIVE.value)


class SubscriptionLifecycle:
    """Per-tenant subscription state machine."""

    def __init__(self, db: AsyncSession, locks: TenantLockManager | None = None):
        self.db = db
        self.locks = locks or get_lock_manager()
        self.catalog = PlanCatalog(db)
        self.payments = PaymentService(db)
        self.tenants = TenantService(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_current(self, tenant_id: str) -> Subscription | None:
        """Current subscription as stored (no lazy expiry)."""
        row = await self._current_row(tenant_id, for_update=False)
        return Subscription.from_row(row) if row else None

    async def history(self, tenant_id: str) -> list[Subscription]:
        """All subscription rows for the tenant, newest first."""
        result = await self.db.execute(
            select(SubscriptionTable)
            .where(SubscriptionTable.tenant_id == tenant_id)
            .order_by(SubscriptionTable.created_at.desc())
        )
        return [Subscription.from_row(row) for row in result.scalars().all()]

    async def events(self, tenant_id: str, limit: int = 100) -> list[SubscriptionEvent]:
        result = await self.db.execute(
            select(SubscriptionEventTable)
            .where(SubscriptionEventTable.tenant_id == tenant_id)
            .order_by(SubscriptionEventTable.created_at.desc())
            .limit(limit)
        )
        return [SubscriptionEvent.model_validate(row) for row in result.scalars().all()]

    # ------------------------------------------------------------------
    # Lazy expiry
    # ------------------------------------------------------------------

    async def expire_if_due(
        self, tenant_id: str, now: datetime | None = None
    ) -> Subscription | None:
        """Apply expiry (and due deferred downgrades) for the tenant.

        Idempotent: an already EXPIRED or CANCELLED subscription is returned
        unchanged.
        """
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self.load_current(tenant_id, now)
            return Subscription.from_row(row) if row else None

    async def _apply_due_changes(self, row: SubscriptionTable, now: datetime) -> bool:
        """Roll a live subscription past its period end. Returns True if changed."""
        if row.status not in _LIVE:
            return False

        end = ensure_aware(row.end_date)
        if now <= end:
            return False

        if row.pending_plan_id and row.status == SubscriptionStatus.ACTIVE.value:
            pending = await self.catalog.get(row.pending_plan_id)
            if pending.is_free:
                previous = row.plan_id
                row.plan_id = pending.id
                row.start_date = end
                row.end_date = end + pending.period_length()
                row.pending_plan_id = None
                row.pending_change_at = None
                # Several free periods may have elapsed since the last check
                while ensure_aware(row.end_date) < now:
                    row.start_date = row.end_date
                    row.end_date = ensure_aware(row.end_date) + pending.period_length()
                self._record_event(
                    row,
                    SubscriptionEventType.DOWNGRADE_APPLIED,
                    {"from_plan_id": previous, "to_plan_id": pending.id},
                    now=now,
                )
                logger.info(
                    "subscription.downgrade_applied",
                    tenant_id=row.tenant_id,
                    subscription_id=row.id,
                    plan_id=pending.id,
                )
                return True

        previous_status = row.status
        row.status = SubscriptionStatus.EXPIRED.value
        self._record_event(
            row,
            SubscriptionEventType.EXPIRED,
            {"previous_status": previous_status, "expired_at": end.isoformat()},
            now=now,
        )
        await self.tenants.notify(
            row.tenant_id,
            "Subscription expired",
            f"Renew within {settings.billing.grace_period_days} days to keep managing your store",
        )
        logger.info(
            "subscription.expired",
            tenant_id=row.tenant_id,
            subscription_id=row.id,
            previous_status=previous_status,
        )
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def activate_trial(
        self,
        tenant_id: str,
        plan_id: str | None = None,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> PlanChangeResult:
        """Start the tenant's one free trial.

        Raises:
            TrialAlreadyUsed: If the tenant has ever had a trial
            InvalidTransition: If the tenant already has a subscription
        """
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            tenant = await self.tenants.get_row(tenant_id, for_update=True)
            if tenant.has_used_trial:
                raise TrialAlreadyUsed(tenant_id)

            row = await self.load_current(tenant_id, now)
            if row is not None:
                raise InvalidTransition(row.status, "activate a trial for")

            plan = await self._trial_plan(plan_id)
            trial_end = now + _days(plan.trial_days)
            row = self._new_row(tenant_id, plan, SubscriptionStatus.TRIAL, now, trial_end)
            row.trial_ends_at = trial_end
            self.db.add(row)
            tenant.has_used_trial = True

            self._record_event(
                row,
                SubscriptionEventType.TRIAL_STARTED,
                {"plan_id": plan.id, "trial_days": plan.trial_days},
                user_id=user_id,
                now=now,
            )
            await self.tenants.notify(
                tenant_id, "Free trial started", f"Your trial ends in {plan.trial_days} days"
            )
            await self.db.commit()

        self._audit("subscription.trial_started", tenant_id, user_id, row.id, plan_id=plan.id)
        return self._applied(
            "activate_trial", plan, row, f"Free trial activated for {plan.trial_days} days"
        )

    async def select_plan(
        self,
        tenant_id: str,
        plan_id: str,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> PlanChangeResult:
        """Choose a plan with no live subscription.

        Free plans activate immediately; paid plans open a payment intent and
        leave the subscription unchanged until the payment is confirmed.
        """
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self.load_current(tenant_id, now)
            state = row.status if row else NO_SUBSCRIPTION
            if row is not None and not self._is_ended(row, now):
                raise InvalidTransition(
                    state,
                    "select a plan for",
                    "A subscription is already active; use upgrade or downgrade instead",
                )

            plan = await self.catalog.get_sellable(plan_id)
            self._ensure_not_trial_only(plan, state, "select a plan for")

            if not plan.is_free:
                intent = await self.payments.create_intent(
                    tenant_id, plan, PaymentAction.SELECT_PLAN
                )
                await self.db.commit()
                return self._pending("select_plan", plan, intent)

            row = await self._start_period(tenant_id, plan, now, replacing=row)
            self._record_event(
                row,
                SubscriptionEventType.ACTIVATED,
                {"plan_id": plan.id, "source": "select_plan"},
                user_id=user_id,
                now=now,
            )
            await self.db.commit()

        self._audit("subscription.plan_selected", tenant_id, user_id, row.id, plan_id=plan.id)
        return self._applied("select_plan", plan, row, f"{plan.name} plan activated")

    async def upgrade(
        self,
        tenant_id: str,
        plan_id: str,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> PlanChangeResult:
        """Move to a new plan immediately. Usage is evaluated against it at once."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self._require_current(tenant_id, now)
            if row.status not in _LIVE:
                raise InvalidTransition(row.status, "upgrade")

            plan = await self.catalog.get_sellable(plan_id)
            self._ensure_not_trial_only(plan, row.status, "upgrade")
            current = await self.catalog.get(row.plan_id)
            if plan.id == current.id:
                raise InvalidTransition(row.status, "upgrade", f"Already on the {plan.name} plan")
            if row.status == SubscriptionStatus.ACTIVE.value and plan.price < current.price:
                raise InvalidTransition(
                    row.status, "upgrade", "Target plan is cheaper; use downgrade instead"
                )

            if not plan.is_free:
                intent = await self.payments.create_intent(tenant_id, plan, PaymentAction.UPGRADE)
                self._record_event(
                    row,
                    SubscriptionEventType.PAYMENT_PENDING,
                    {"plan_id": plan.id, "payment_id": intent.id, "action": "upgrade"},
                    user_id=user_id,
                    now=now,
                )
                await self.db.commit()
                return self._pending("upgrade", plan, intent)

            self._apply_upgrade(row, current, plan, now, user_id)
            await self.db.commit()

        self._audit("subscription.upgraded", tenant_id, user_id, row.id, plan_id=plan.id)
        return self._applied("upgrade", plan, row, f"Upgraded to {plan.name}")

    async def downgrade(
        self,
        tenant_id: str,
        plan_id: str,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> PlanChangeResult:
        """Schedule a cheaper plan for the end of the current period.

        The current plan's quotas stay in force until then.
        """
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self._require_current(tenant_id, now)
            if row.status != SubscriptionStatus.ACTIVE.value:
                raise InvalidTransition(row.status, "downgrade")

            plan = await self.catalog.get_sellable(plan_id)
            self._ensure_not_trial_only(plan, row.status, "downgrade")
            current = await self.catalog.get(row.plan_id)
            if plan.price >= current.price:
                raise InvalidTransition(
                    row.status, "downgrade", "Downgrade target must be cheaper than the current plan"
                )

            effective_at = ensure_aware(row.end_date)
            row.pending_plan_id = plan.id
            row.pending_change_at = effective_at
            self._record_event(
                row,
                SubscriptionEventType.DOWNGRADE_SCHEDULED,
                {
                    "from_plan_id": current.id,
                    "to_plan_id": plan.id,
                    "effective_at": effective_at.isoformat(),
                },
                user_id=user_id,
                now=now,
            )
            await self.db.commit()

        self._audit("subscription.downgrade_scheduled", tenant_id, user_id, row.id, plan_id=plan.id)
        result = self._applied(
            "downgrade",
            plan,
            row,
            f"Downgrade to {plan.name} scheduled for {effective_at.date().isoformat()}",
        )
        result.effective_at = effective_at
        return result

    async def renew(
        self, tenant_id: str, user_id: str | None = None, now: datetime | None = None
    ) -> PlanChangeResult:
        """Extend an ACTIVE subscription near its end, or restart an EXPIRED one.

        A scheduled downgrade is applied at the renewal boundary.
        """
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self._require_current(tenant_id, now)
            if row.status == SubscriptionStatus.ACTIVE.value:
                window = _days(settings.billing.renewal_window_days)
                if ensure_aware(row.end_date) - now > window:
                    raise InvalidTransition(
                        row.status,
                        "renew",
                        f"Renewal opens {settings.billing.renewal_window_days} days "
                        "before the period ends",
                    )
            elif row.status != SubscriptionStatus.EXPIRED.value:
                raise InvalidTransition(row.status, "renew")

            plan = await self.catalog.get(row.pending_plan_id or row.plan_id)
            if plan.is_free and plan.trial_days > 0:
                raise InvalidTransition(
                    row.status, "renew", "The free trial cannot be renewed; select a plan"
                )

            if not plan.is_free:
                intent = await self.payments.create_intent(tenant_id, plan, PaymentAction.RENEW)
                self._record_event(
                    row,
                    SubscriptionEventType.PAYMENT_PENDING,
                    {"plan_id": plan.id, "payment_id": intent.id, "action": "renew"},
                    user_id=user_id,
                    now=now,
                )
                await self.db.commit()
                return self._pending("renew", plan, intent)

            self._apply_renewal(row, plan, now, user_id)
            await self.db.commit()

        self._audit("subscription.renewed", tenant_id, user_id, row.id, plan_id=plan.id)
        return self._applied("renew", plan, row, f"{plan.name} renewed")

    async def cancel(
        self, tenant_id: str, user_id: str | None = None, now: datetime | None = None
    ) -> PlanChangeResult:
        """Cancel at period end. Access continues until ``end_date``."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self._require_current(tenant_id, now)
            if row.status not in _LIVE:
                raise InvalidTransition(row.status, "cancel")

            previous_status = row.status
            row.status = SubscriptionStatus.CANCELLED.value
            row.cancelled_at = now
            row.pending_plan_id = None
            row.pending_change_at = None
            self._record_event(
                row,
                SubscriptionEventType.CANCELLED,
                {"previous_status": previous_status},
                user_id=user_id,
                now=now,
            )
            await self.db.commit()
            plan = await self.catalog.get(row.plan_id)

        self._audit("subscription.cancelled", tenant_id, user_id, row.id)
        end = ensure_aware(row.end_date)
        result = self._applied(
            "cancel", plan, row, f"Subscription cancelled. Access continues until {end.date()}"
        )
        result.effective_at = end
        return result

    async def reactivate(
        self, tenant_id: str, user_id: str | None = None, now: datetime | None = None
    ) -> PlanChangeResult:
        """Undo a cancellation while the paid period is still running."""
        now = now or utcnow()
        async with self.locks.hold(tenant_id):
            row = await self._require_current(tenant_id, now)
            if row.status != SubscriptionStatus.CANCELLED.value:
                raise InvalidTransition(row.status, "reactivate")
            if self._is_ended(row, now):
                raise InvalidTransition(
                    row.status, "reactivate", "The cancelled period has ended; select a plan"
                )

            row.status = (
                SubscriptionStatus.TRIAL.value
                if row.trial_ends_at is not None
                else SubscriptionStatus.ACTIVE.value
            )
            row.cancelled_at = None
            self._record_event(
                row,
                SubscriptionEventType.REACTIVATED,
                {"status": row.status},
                user_id=user_id,
                now=now,
            )
            await self.db.commit()
            plan = await self.catalog.get(row.plan_id)

        self._audit("subscription.reactivated", tenant_id, user_id, row.id)
        return self._applied("reactivate", plan, row, "Subscription reactivated")

    async def confirm_payment(
        self,
        payment_id: str,
        confirmed: bool,
        transaction_id: str | None = None,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> PaymentConfirmation:
        """Settle a pending payment and apply the move it unlocks.

        A confirmed payment always leaves the tenant ACTIVE on the paid plan.
        """
        now = now or utcnow()
        intent = await self.payments.get_any(payment_id)
        tenant_id = intent.tenant_id

        async with self.locks.hold(tenant_id):
            if not confirmed:
                settled = await self.payments.settle(
                    payment_id, PaymentStatus.FAILED, transaction_id, now
                )
                await self.tenants.notify(
                    tenant_id, "Payment failed", "Your plan change was not applied"
                )
                await self.db.commit()
                logger.info("payment.rejected", tenant_id=tenant_id, payment_id=payment_id)
                current = await self.get_current(tenant_id)
                return PaymentConfirmation(payment=settled, subscription=current)

            settled = await self.payments.settle(
                payment_id, PaymentStatus.PAID, transaction_id, now
            )
            plan = await self.catalog.get(settled.plan_id)
            row = await self.load_current(tenant_id, now)
            row = await self._apply_paid(row, settled, plan, now, user_id)
            await self.db.commit()

        self._audit(
            "subscription.payment_confirmed",
            tenant_id,
            user_id,
            row.id,
            payment_id=payment_id,
            plan_id=plan.id,
            payment_action=settled.action.value,
        )
        return PaymentConfirmation(payment=settled, subscription=Subscription.from_row(row))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _apply_paid(
        self,
        row: SubscriptionTable | None,
        intent: PaymentIntent,
        plan: Plan,
        now: datetime,
        user_id: str | None,
    ) -> SubscriptionTable:
        if row is not None and row.status in _LIVE and intent.action == PaymentAction.UPGRADE:
            current = await self.catalog.get(row.plan_id)
            self._apply_upgrade(row, current, plan, now, user_id)
            return row

        if row is not None and intent.action == PaymentAction.RENEW and row.status in (
            SubscriptionStatus.ACTIVE.value,
            SubscriptionStatus.EXPIRED.value,
        ):
            self._apply_renewal(row, plan, now, user_id)
            return row

        row = await self._start_period(intent.tenant_id, plan, now, replacing=row)
        self._record_event(
            row,
            SubscriptionEventType.ACTIVATED,
            {"plan_id": plan.id, "payment_id": intent.id, "source": intent.action.value},
            user_id=user_id,
            now=now,
        )
        return row

    def _apply_upgrade(
        self,
        row: SubscriptionTable,
        current: Plan,
        plan: Plan,
        now: datetime,
        user_id: str | None,
    ) -> None:
        previous_status = row.status
        row.plan_id = plan.id
        row.status = SubscriptionStatus.ACTIVE.value
        row.start_date = now
        row.end_date = now + plan.period_length()
        row.trial_ends_at = None
        row.pending_plan_id = None
        row.pending_change_at = None
        row.cancelled_at = None
        self._record_event(
            row,
            SubscriptionEventType.UPGRADED,
            {"from_plan_id": current.id, "to_plan_id": plan.id, "previous_status": previous_status},
            user_id=user_id,
            now=now,
        )

    def _apply_renewal(
        self, row: SubscriptionTable, plan: Plan, now: datetime, user_id: str | None
    ) -> None:
        previous_plan = row.plan_id
        if row.status == SubscriptionStatus.EXPIRED.value:
            start = now
        else:
            start = ensure_aware(row.end_date)
        row.plan_id = plan.id
        row.status = SubscriptionStatus.ACTIVE.value
        row.start_date = start
        row.end_date = start + plan.period_length()
        row.trial_ends_at = None
        row.pending_plan_id = None
        row.pending_change_at = None
        self._record_event(
            row,
            SubscriptionEventType.RENEWED,
            {
                "from_plan_id": previous_plan,
                "plan_id": plan.id,
                "end_date": ensure_aware(row.end_date).isoformat(),
            },
            user_id=user_id,
            now=now,
        )

    async def _start_period(
        self,
        tenant_id: str,
        plan: Plan,
        now: datetime,
        replacing: SubscriptionTable | None,
    ) -> SubscriptionTable:
        """Create a new current ACTIVE row, retiring the previous one."""
        if replacing is not None:
            replacing.is_current = False
            await self.db.flush()
        row = self._new_row(
            tenant_id, plan, SubscriptionStatus.ACTIVE, now, now + plan.period_length()
        )
        self.db.add(row)
        return row

    def _new_row(
        self,
        tenant_id: str,
        plan: Plan,
        status: SubscriptionStatus,
        start: datetime,
        end: datetime,
    ) -> SubscriptionTable:
        return SubscriptionTable(
            id=generate_id("sub"),
            tenant_id=tenant_id,
            plan_id=plan.id,
            status=status.value,
            start_date=start,
            end_date=end,
            is_current=True,
        )

    async def _trial_plan(self, plan_id: str | None) -> Plan:
        if plan_id:
            plan = await self.catalog.get_sellable(plan_id)
            if plan.trial_days <= 0:
                raise InvalidTransition(
                    NO_SUBSCRIPTION, "activate a trial for", f"{plan.name} does not offer a trial"
                )
            return plan

        plan = await self.catalog.find_by_name(settings.billing.trial_plan_name)
        if plan is not None and plan.is_active and plan.trial_days > 0:
            return plan

        candidates = [p for p in await self.catalog.list_active() if p.trial_days > 0]
        if not candidates:
            raise PlanNotFound("No trial plan is available")
        return candidates[0]

    async def _current_row(
        self, tenant_id: str, for_update: bool = True
    ) -> SubscriptionTable | None:
        stmt = select(SubscriptionTable).where(
            SubscriptionTable.tenant_id == tenant_id,
            SubscriptionTable.is_current.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def load_current(self, tenant_id: str, now: datetime) -> SubscriptionTable | None:
        """Current row with due changes applied and committed. Caller holds the lock."""
        row = await self._current_row(tenant_id)
        if row is not None and await self._apply_due_changes(row, now):
            await self.db.commit()
            row = await self._current_row(tenant_id)
        return row

    async def _require_current(self, tenant_id: str, now: datetime) -> SubscriptionTable:
        row = await self.load_current(tenant_id, now)
        if row is None:
            raise SubscriptionNotFound("No subscription for this store", tenant_id=tenant_id)
        return row

    @staticmethod
    def _ensure_not_trial_only(plan: Plan, state: str, action: str) -> None:
        """Trial plans are entered only through ``activate_trial``, never by a plan change."""
        if plan.is_free and plan.trial_days > 0:
            raise InvalidTransition(
                state, action, f"{plan.name} is only available through the trial"
            )

    @staticmethod
    def _is_ended(row: SubscriptionTable, now: datetime) -> bool:
        if row.status == SubscriptionStatus.EXPIRED.value:
            return True
        if row.status == SubscriptionStatus.CANCELLED.value:
            return now > ensure_aware(row.end_date)
        return False

    def _record_event(
        self,
        row: SubscriptionTable,
        event_type: SubscriptionEventType,
        data: dict[str, Any],
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> None:
        self.db.add(
            SubscriptionEventTable(
                id=generate_id("evt"),
                tenant_id=row.tenant_id,
                subscription_id=row.id,
                event_type=event_type.value,
                event_data=data,
                user_id=user_id,
                created_at=now or utcnow(),
            )
        )

    @staticmethod
    def _applied(
        action: str, plan: Plan, row: SubscriptionTable, message: str
    ) -> PlanChangeResult:
        return PlanChangeResult(
            action=action,
            plan_id=plan.id,
            plan_name=plan.name,
            amount=plan.price,
            currency=plan.currency,
            requires_payment=False,
            effective_at=ensure_aware(row.start_date),
            subscription=Subscription.from_row(row),
            message=message,
        )

    @staticmethod
    def _pending(action: str, plan: Plan, intent: PaymentIntent) -> PlanChangeResult:
        logger.info(
            "subscription.payment_required",
            tenant_id=intent.tenant_id,
            action=action,
            plan_id=plan.id,
            payment_id=intent.id,
        )
        return PlanChangeResult(
            action=action,
            plan_id=plan.id,
            plan_name=plan.name,
            amount=intent.amount,
            currency=intent.currency,
            requires_payment=True,
            payment_id=intent.id,
            message=f"Complete the payment of {intent.amount} {intent.currency} to continue",
        )

    @staticmethod
    def _audit(
        event: str, tenant_id: str, user_id: str | None, subscription_id: str, /, **details: Any
    ) -> None:
        audit(
            event,
            tenant_id=tenant_id,
            actor_id=user_id,
            resource="subscription",
            resource_id=subscription_id,
            **details,
        )


def _days(n: int) -> timedelta:
    return timedelta(days=n)


__all__ = ["SubscriptionLifecycle", "NO_SUBSCRIPTION"]
