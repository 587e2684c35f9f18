"""
Tests for the plan catalog endpoints.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from tests.conftest import NOW, TENANT_ID

pytestmark = pytest.mark.integration


class TestPublicCatalog:
    """Reads available without a token."""

    async def test_lists_only_active_plans(self, client: AsyncClient, admin_headers, plans):
        await client.post(f"/api/v1/plans/{plans['growth'].id}/deactivate", headers=admin_headers)

        response = await client.get("/api/v1/plans")

        assert response.status_code == 200
        names = [plan["name"] for plan in response.json()]
        assert "Growth" not in names
        assert {"Free Trial", "Hobby", "Starter"} <= set(names)

    async def test_plan_fields_are_camel_case(self, client: AsyncClient, starter_plan):
        response = await client.get(f"/api/v1/plans/{starter_plan.id}")

        body = response.json()
        assert body["maxProducts"] == 100
        assert body["maxSubcategoriesPerCategory"] == 5
        assert Decimal(body["price"]) == Decimal("499")

    async def test_unknown_plan(self, client: AsyncClient):
        response = await client.get("/api/v1/plans/plan_missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "PLAN_NOT_FOUND"


class TestOperatorCatalog:
    """Platform admin writes."""

    async def test_store_owner_cannot_create_plans(self, client: AsyncClient, owner_headers):
        response = await client.post(
            "/api/v1/plans",
            json={"name": "Pro", "price": "999", "maxProducts": 1, "maxCategories": 1,
                  "maxSubcategoriesPerCategory": 1},
            headers=owner_headers,
        )

        assert response.status_code == 403

    async def test_admin_creates_plan_with_default_currency(
        self, client: AsyncClient, admin_headers
    ):
        response = await client.post(
            "/api/v1/plans",
            json={
                "name": "Pro",
                "price": "999",
                "maxProducts": 500,
                "maxCategories": 20,
                "maxSubcategoriesPerCategory": 10,
                "customDomain": True,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["currency"] == "BDT"
        assert body["isActive"] is True
        assert body["customDomain"] is True

    async def test_negative_quota_rejected(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/plans",
            json={"name": "Bad", "price": "1", "maxProducts": -1, "maxCategories": 1,
                  "maxSubcategoriesPerCategory": 1},
            headers=admin_headers,
        )

        assert response.status_code == 422

    async def test_update_plan_quota(self, client: AsyncClient, admin_headers, starter_plan):
        response = await client.patch(
            f"/api/v1/plans/{starter_plan.id}", json={"maxProducts": 250}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["maxProducts"] == 250
        assert response.json()["maxCategories"] == 10

    async def test_null_quota_rejected(self, client: AsyncClient, admin_headers, starter_plan):
        response = await client.patch(
            f"/api/v1/plans/{starter_plan.id}", json={"maxProducts": None}, headers=admin_headers
        )
        plan = await client.get(f"/api/v1/plans/{starter_plan.id}")

        assert response.status_code == 422
        assert plan.json()["maxProducts"] == 100

    async def test_seed_defaults_is_idempotent(self, client: AsyncClient, admin_headers):
        first = await client.post("/api/v1/plans/seed", headers=admin_headers)
        second = await client.post("/api/v1/plans/seed", headers=admin_headers)

        assert first.json()["message"] == "Created 3 plan(s)"
        assert second.json()["message"] == "Default plans already exist"
        assert second.json()["created"] == []

    async def test_admin_list_includes_inactive(self, client: AsyncClient, admin_headers, plans):
        await client.post(f"/api/v1/plans/{plans['free'].id}/deactivate", headers=admin_headers)

        response = await client.get("/api/v1/plans/admin/all", headers=admin_headers)

        hobby = next(plan for plan in response.json() if plan["name"] == "Hobby")
        assert hobby["isActive"] is False

    async def test_delete_unused_plan(self, client: AsyncClient, admin_headers, free_plan):
        response = await client.delete(f"/api/v1/plans/{free_plan.id}", headers=admin_headers)

        assert response.status_code == 204

    async def test_delete_referenced_plan_conflicts(
        self, client: AsyncClient, admin_headers, db_session, locks, free_plan
    ):
        await SubscriptionLifecycle(db_session, locks).select_plan(TENANT_ID, free_plan.id, now=NOW)

        response = await client.delete(f"/api/v1/plans/{free_plan.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "PLAN_IN_USE"
