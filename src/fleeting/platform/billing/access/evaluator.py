"""
Access evaluator.

``evaluate`` is pure and total: it takes a subscription, a usage snapshot and
an instant, does no I/O, and always returns a complete ``AccessDecision``.

Rules, in order:

1. No subscription, or CANCELLED past its period end: no access.
2. EXPIRED (or TRIAL/ACTIVE past period end, not yet lazily expired): grace
   period while whole days since expiry <= ``grace_days``. Creation is blocked
   but existing data may still be updated and deleted. Beyond that, no access.
3. TRIAL, ACTIVE, or CANCELLED inside its paid period: access; creation needs
   headroom for the requested kind (per category for subcategories).
"""

import math
from datetime import datetime, timedelta

from fleeting.platform.billing.access.models import AccessDecision, DenialReason
from fleeting.platform.billing.models import ensure_aware
from fleeting.platform.billing.subscriptions.models import Subscription, SubscriptionStatus
from fleeting.platform.billing.usage.models import ResourceKind, UsageSnapshot

GRACE_DAYS = 7

NO_SUBSCRIPTION_MESSAGE = "No active subscription"

_ONE_DAY = timedelta(days=1)


def evaluate(
    subscription: Subscription | None,
    usage: UsageSnapshot | None,
    now: datetime,
    resource_kind: ResourceKind | None = None,
    category_id: str | None = None,
    grace_days: int = GRACE_DAYS,
) -> AccessDecision:
    """Compute the access decision for one tenant at ``now``.

    Args:
        subscription: The tenant's current subscription, or None
        usage: Usage against the currently effective plan
        now: Evaluation instant (timezone-aware)
        resource_kind: Kind the caller wants to create; None for the session bundle
        category_id: Target category when ``resource_kind`` is SUBCATEGORY
        grace_days: Days after expiry during which update/delete stay allowed
    """
    now = ensure_aware(now)

    if subscription is None:
        return _denied(None, resource_kind, category_id, NO_SUBSCRIPTION_MESSAGE)

    status = subscription.status
    period_end = ensure_aware(subscription.period_end)

    if status == SubscriptionStatus.CANCELLED and now > period_end:
        return _denied(status, resource_kind, category_id, NO_SUBSCRIPTION_MESSAGE)

    if status == SubscriptionStatus.EXPIRED or now > period_end:
        return _lapsed(subscription, now, period_end, resource_kind, category_id, grace_days)

    return _in_period(subscription, usage, now, period_end, resource_kind, category_id)


def days_since_expiry(period_end: datetime, now: datetime) -> int:
    """Whole days elapsed since ``period_end`` (0 on the day of expiry)."""
    elapsed = ensure_aware(now) - ensure_aware(period_end)
    if elapsed <= timedelta(0):
        return 0
    return elapsed // _ONE_DAY


def days_until(period_end: datetime, now: datetime) -> int:
    """Days left until ``period_end``, rounded up and clamped to zero."""
    left = ensure_aware(period_end) - ensure_aware(now)
    if left <= timedelta(0):
        return 0
    return math.ceil(left / _ONE_DAY)


def _lapsed(
    subscription: Subscription,
    now: datetime,
    period_end: datetime,
    resource_kind: ResourceKind | None,
    category_id: str | None,
    grace_days: int,
) -> AccessDecision:
    since = days_since_expiry(period_end, now)
    if since > grace_days:
        return _denied(
            SubscriptionStatus.EXPIRED,
            resource_kind,
            category_id,
            "Subscription expired. Renew or select a plan to restore access",
            reason=DenialReason.EXPIRED,
        )

    left = grace_days - since
    if left == 0:
        message = "Subscription expired. Grace period ends today"
    else:
        message = f"Subscription expired. {_days(left)} left in grace period"

    return AccessDecision(
        has_access=True,
        can_create=False,
        can_update=True,
        can_delete=True,
        is_in_grace_period=True,
        grace_period_days_remaining=left,
        days_remaining=0,
        message=message,
        status=SubscriptionStatus.EXPIRED,
        resource_kind=resource_kind,
        category_id=category_id,
        can_create_by_kind={kind: False for kind in ResourceKind},
        denial_reason=DenialReason.GRACE_PERIOD,
    )


def _in_period(
    subscription: Subscription,
    usage: UsageSnapshot | None,
    now: datetime,
    period_end: datetime,
    resource_kind: ResourceKind | None,
    category_id: str | None,
) -> AccessDecision:
    remaining_days = days_until(period_end, now)
    bundle = _creation_bundle(usage)

    can_create = True
    reason = None
    message = _status_message(subscription.status, remaining_days)

    if resource_kind is not None:
        if usage is None:
            used, limit = 0, 0
        else:
            used, limit = usage.used_and_limit(resource_kind, category_id)
        can_create = limit - used > 0
        if not can_create:
            reason = DenialReason.QUOTA
            message = f"Plan limit reached: {used}/{limit} {resource_kind.label}"
            if resource_kind == ResourceKind.SUBCATEGORY and category_id is not None:
                message += " in this category"

    return AccessDecision(
        has_access=True,
        can_create=can_create,
        can_update=True,
        can_delete=True,
        days_remaining=remaining_days,
        message=message,
        status=subscription.status,
        resource_kind=resource_kind,
        category_id=category_id,
        can_create_by_kind=bundle,
        denial_reason=reason,
    )


def _creation_bundle(usage: UsageSnapshot | None) -> dict[ResourceKind, bool]:
    if usage is None:
        return {kind: False for kind in ResourceKind}
    return {
        ResourceKind.PRODUCT: usage.products.remaining > 0,
        ResourceKind.CATEGORY: usage.categories.remaining > 0,
        ResourceKind.ORDER: usage.orders.remaining > 0,
        # Checked against the target category at creation time
        ResourceKind.SUBCATEGORY: usage.subcategories_per_category.limit > 0,
    }


def _status_message(status: SubscriptionStatus, remaining_days: int) -> str:
    if status == SubscriptionStatus.TRIAL:
        if remaining_days == 0:
            return "Trial ends today"
        return f"Trial ends in {_days(remaining_days)}"
    if status == SubscriptionStatus.CANCELLED:
        if remaining_days == 0:
            return "Subscription cancelled. Access ends today"
        return f"Subscription cancelled. Access ends in {_days(remaining_days)}"
    if remaining_days == 0:
        return "Subscription active. Renews today"
    return f"Subscription active. {_days(remaining_days)} remaining"


def _denied(
    status: SubscriptionStatus | None,
    resource_kind: ResourceKind | None,
    category_id: str | None,
    message: str,
    reason: DenialReason = DenialReason.NO_SUBSCRIPTION,
) -> AccessDecision:
    return AccessDecision(
        has_access=False,
        can_create=False,
        can_update=False,
        can_delete=False,
        message=message,
        status=status,
        resource_kind=resource_kind,
        category_id=category_id,
        can_create_by_kind={kind: False for kind in ResourceKind},
        denial_reason=reason,
    )


def _days(n: int) -> str:
    return "1 day" if n == 1 else f"{n} days"


__all__ = ["evaluate", "days_since_expiry", "days_until", "GRACE_DAYS", "NO_SUBSCRIPTION_MESSAGE"]
