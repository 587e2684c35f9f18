"""
Tests for tenant settings endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from fleeting.platform.billing.usage.models import ResourceKind, UsageCounterTable
from tests.billing.test_subscriptions_api import approve
from tests.conftest import TENANT_ID

pytestmark = pytest.mark.integration


async def select_plan(client: AsyncClient, owner_headers, plan_id: str):
    response = await client.post(
        "/api/v1/subscriptions/select-plan", json={"planId": plan_id}, headers=owner_headers
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestTenantSettings:
    async def test_tenant_created_on_first_sight(self, client: AsyncClient, owner_headers):
        response = await client.get("/api/v1/tenant", headers=owner_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == TENANT_ID
        assert body["hasUsedTrial"] is False
        assert body["customDomain"] is None

    async def test_custom_domain_requires_feature(
        self, client: AsyncClient, owner_headers, plans
    ):
        await select_plan(client, owner_headers, plans["free"].id)

        response = await client.put(
            "/api/v1/tenant/domain", json={"domain": "shop.example.com"}, headers=owner_headers
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "ACCESS_DENIED"
        assert response.json()["message"] == "Your plan does not include custom domain"

    async def test_custom_domain_on_growth(
        self, client: AsyncClient, owner_headers, admin_headers, plans
    ):
        pending = await select_plan(client, owner_headers, plans["growth"].id)
        await approve(client, admin_headers, pending["paymentId"])

        response = await client.put(
            "/api/v1/tenant/domain", json={"domain": "Shop.Example.com"}, headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["customDomain"] == "shop.example.com"

    async def test_invalid_domain(self, client: AsyncClient, owner_headers):
        response = await client.put(
            "/api/v1/tenant/domain", json={"domain": "not a domain"}, headers=owner_headers
        )

        assert response.status_code == 422


class TestReconcile:
    """Operator recount of usage counters."""

    async def test_owner_forbidden(self, client: AsyncClient, owner_headers):
        response = await client.post("/api/v1/tenant/usage/reconcile", headers=owner_headers)

        assert response.status_code == 403

    async def test_repairs_drift(
        self, client: AsyncClient, owner_headers, admin_headers, db_session, plans
    ):
        await select_plan(client, owner_headers, plans["free"].id)
        created = await client.post(
            "/api/v1/products", json={"name": "Mug"}, headers=owner_headers
        )
        assert created.status_code == 201
        await db_session.execute(
            update(UsageCounterTable)
            .where(
                UsageCounterTable.tenant_id == TENANT_ID,
                UsageCounterTable.resource_kind == ResourceKind.PRODUCT.value,
            )
            .values(count=4)
        )
        await db_session.commit()

        response = await client.post(
            "/api/v1/tenant/usage/reconcile",
            headers={**admin_headers, "X-Tenant-ID": TENANT_ID},
        )
        usage = await client.get("/api/v1/subscriptions/usage", headers=owner_headers)

        assert response.status_code == 200
        assert response.json() == {"PRODUCT": [4, 1]}
        assert usage.json()["products"]["used"] == 1
