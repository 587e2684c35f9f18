"""
Tests for the pure access evaluator.

Covers grace period boundaries, quota verdicts, status messages and the
per-category subcategory check.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from fleeting.platform.billing.access.evaluator import (
    NO_SUBSCRIPTION_MESSAGE,
    days_since_expiry,
    days_until,
    evaluate,
)
from fleeting.platform.billing.access.models import DenialReason
from fleeting.platform.billing.plans.models import Plan
from fleeting.platform.billing.subscriptions.models import Subscription, SubscriptionStatus
from fleeting.platform.billing.usage.models import ResourceKind
from fleeting.platform.billing.usage.service import build_snapshot

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_plan(**overrides) -> Plan:
    fields = {
        "id": "plan_test",
        "name": "Starter",
        "price": Decimal("499"),
        "currency": "BDT",
        "max_products": 10,
        "max_categories": 5,
        "max_subcategories_per_category": 5,
        "max_orders": 100,
    }
    fields.update(overrides)
    return Plan(**fields)


def make_subscription(
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    end: datetime | None = None,
    trial_ends_at: datetime | None = None,
) -> Subscription:
    end = end or NOW + timedelta(days=20)
    return Subscription(
        id="sub_test",
        tenant_id="store-alpha",
        plan_id="plan_test",
        status=status,
        start_date=end - timedelta(days=30),
        end_date=end,
        trial_ends_at=trial_ends_at,
    )


def make_usage(plan: Plan | None = None, products=0, categories=0, orders=0, per_category=None):
    plan = plan if plan is not None else make_plan()
    pooled = {
        ResourceKind.PRODUCT: products,
        ResourceKind.CATEGORY: categories,
        ResourceKind.ORDER: orders,
    }
    return build_snapshot("store-alpha", plan, pooled, per_category or {})


class TestNoSubscription:
    """Tenants without a usable subscription."""

    def test_no_subscription_denies_everything(self):
        decision = evaluate(None, make_usage(), NOW)

        assert decision.has_access is False
        assert decision.can_create is False
        assert decision.can_update is False
        assert decision.can_delete is False
        assert decision.message == NO_SUBSCRIPTION_MESSAGE
        assert decision.denial_reason == DenialReason.NO_SUBSCRIPTION
        assert not any(decision.can_create_by_kind.values())

    def test_cancelled_past_period_end_is_no_subscription(self):
        sub = make_subscription(SubscriptionStatus.CANCELLED, end=NOW - timedelta(hours=1))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.has_access is False
        assert decision.message == NO_SUBSCRIPTION_MESSAGE


class TestInPeriod:
    """TRIAL, ACTIVE and CANCELLED-within-period subscriptions."""

    def test_active_within_period_has_full_access(self):
        decision = evaluate(make_subscription(), make_usage(), NOW)

        assert decision.has_access is True
        assert decision.can_create is True
        assert decision.can_update is True
        assert decision.can_delete is True
        assert decision.is_in_grace_period is False
        assert decision.days_remaining == 20
        assert decision.message == "Subscription active. 20 days remaining"

    def test_days_remaining_rounds_up_partial_days(self):
        sub = make_subscription(end=NOW + timedelta(days=2, hours=1))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.days_remaining == 3

    def test_trial_message_uses_trial_end(self):
        trial_end = NOW + timedelta(days=1)
        sub = make_subscription(SubscriptionStatus.TRIAL, end=trial_end, trial_ends_at=trial_end)

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.has_access is True
        assert decision.message == "Trial ends in 1 day"

    def test_cancelled_within_period_keeps_access(self):
        sub = make_subscription(SubscriptionStatus.CANCELLED, end=NOW + timedelta(days=5))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.has_access is True
        assert decision.can_create is True
        assert decision.message == "Subscription cancelled. Access ends in 5 days"

    def test_products_at_limit_block_creation_with_message(self):
        decision = evaluate(
            make_subscription(),
            make_usage(products=10),
            NOW,
            resource_kind=ResourceKind.PRODUCT,
        )

        assert decision.has_access is True
        assert decision.can_create is False
        assert decision.can_update is True
        assert decision.quota_exceeded is True
        assert decision.message == "Plan limit reached: 10/10 products"

    def test_bundle_reports_headroom_per_kind(self):
        decision = evaluate(make_subscription(), make_usage(products=10, categories=1), NOW)

        assert decision.can_create is True
        assert decision.can_create_by_kind[ResourceKind.PRODUCT] is False
        assert decision.can_create_by_kind[ResourceKind.CATEGORY] is True
        assert decision.can_create_by_kind[ResourceKind.ORDER] is True

    def test_over_quota_after_plan_edit_blocks_creation(self):
        plan = make_plan(max_products=3)

        decision = evaluate(
            make_subscription(),
            make_usage(plan, products=8),
            NOW,
            resource_kind=ResourceKind.PRODUCT,
        )

        assert decision.can_create is False
        assert decision.message == "Plan limit reached: 8/3 products"

    def test_subcategory_quota_is_per_category(self):
        usage = make_usage(per_category={"cat_a": 5, "cat_b": 2})
        sub = make_subscription()

        full = evaluate(sub, usage, NOW, ResourceKind.SUBCATEGORY, category_id="cat_a")
        open_ = evaluate(sub, usage, NOW, ResourceKind.SUBCATEGORY, category_id="cat_b")

        assert full.can_create is False
        assert full.message == "Plan limit reached: 5/5 subcategories in this category"
        assert open_.can_create is True

    def test_zero_limit_plan_cannot_create(self):
        plan = make_plan(max_orders=0)

        decision = evaluate(
            make_subscription(), make_usage(plan), NOW, resource_kind=ResourceKind.ORDER
        )

        assert decision.can_create is False


class TestGracePeriod:
    """Expired subscriptions within and beyond the grace window."""

    @pytest.mark.parametrize(
        ("days_expired", "expected_left"),
        [(0, 7), (1, 6), (6, 1), (7, 0)],
    )
    def test_within_grace_allows_update_and_delete(self, days_expired, expected_left):
        end = NOW - timedelta(days=days_expired, minutes=1)
        sub = make_subscription(SubscriptionStatus.EXPIRED, end=end)

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.has_access is True
        assert decision.is_in_grace_period is True
        assert decision.can_create is False
        assert decision.can_update is True
        assert decision.can_delete is True
        assert decision.grace_period_days_remaining == expected_left
        assert decision.days_remaining == 0

    def test_grace_ends_today_message(self):
        sub = make_subscription(SubscriptionStatus.EXPIRED, end=NOW - timedelta(days=7, hours=2))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.message == "Subscription expired. Grace period ends today"

    def test_eight_days_after_expiry_denies_all_access(self):
        sub = make_subscription(SubscriptionStatus.EXPIRED, end=NOW - timedelta(days=8))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.has_access is False
        assert decision.can_update is False
        assert decision.can_delete is False
        assert decision.denial_reason == DenialReason.EXPIRED

    def test_active_past_end_is_treated_as_expired(self):
        sub = make_subscription(SubscriptionStatus.ACTIVE, end=NOW - timedelta(days=2))

        decision = evaluate(sub, make_usage(), NOW)

        assert decision.status == SubscriptionStatus.EXPIRED
        assert decision.is_in_grace_period is True
        assert decision.grace_period_days_remaining == 5

    def test_custom_grace_window(self):
        sub = make_subscription(SubscriptionStatus.EXPIRED, end=NOW - timedelta(days=3))

        decision = evaluate(sub, make_usage(), NOW, grace_days=2)

        assert decision.has_access is False

    def test_creation_request_during_grace_is_not_a_quota_denial(self):
        sub = make_subscription(SubscriptionStatus.EXPIRED, end=NOW - timedelta(days=1))

        decision = evaluate(sub, make_usage(), NOW, resource_kind=ResourceKind.PRODUCT)

        assert decision.can_create is False
        assert decision.quota_exceeded is False
        assert decision.denial_reason == DenialReason.GRACE_PERIOD


class TestDayMath:
    """Helpers behind the day counters."""

    def test_days_since_expiry_floors(self):
        end = NOW - timedelta(days=2, hours=23)
        assert days_since_expiry(end, NOW) == 2

    def test_days_since_expiry_before_end_is_zero(self):
        assert days_since_expiry(NOW + timedelta(days=1), NOW) == 0

    def test_days_until_clamps_to_zero(self):
        assert days_until(NOW - timedelta(days=1), NOW) == 0

    def test_naive_datetimes_are_treated_as_utc(self):
        naive_end = (NOW + timedelta(days=3)).replace(tzinfo=None)
        assert days_until(naive_end, NOW) == 3
