"""
Tests for payment history, manual verification and the provider webhook.
"""

import pytest
from httpx import AsyncClient

from fleeting.platform.settings import settings
from tests.conftest import OTHER_TENANT_ID

pytestmark = pytest.mark.integration


@pytest.fixture
async def payment_id(client: AsyncClient, owner_headers, plans) -> str:
    response = await client.post(
        "/api/v1/subscriptions/select-plan",
        json={"planId": plans["starter"].id},
        headers=owner_headers,
    )
    return response.json()["paymentId"]


def webhook_headers(secret: str | None = None) -> dict[str, str]:
    return {
        settings.billing.payment_webhook_header: secret
        if secret is not None
        else settings.billing.payment_webhook_secret
    }


class TestPaymentReads:
    """Store owner views."""

    async def test_history_lists_pending_intent(
        self, client: AsyncClient, owner_headers, payment_id
    ):
        response = await client.get("/api/v1/payments/history", headers=owner_headers)

        assert response.status_code == 200
        [intent] = response.json()
        assert intent["id"] == payment_id
        assert intent["status"] == "PENDING"
        assert intent["action"] == "SELECT_PLAN"

    async def test_payment_of_other_tenant_is_hidden(
        self, client: AsyncClient, admin_headers, payment_id
    ):
        response = await client.get(
            f"/api/v1/payments/{payment_id}",
            headers={**admin_headers, "X-Tenant-ID": OTHER_TENANT_ID},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PAYMENT_NOT_FOUND"


class TestManualVerification:
    """Operator approval and rejection."""

    async def test_store_owner_cannot_verify(self, client: AsyncClient, owner_headers, payment_id):
        response = await client.post(
            "/api/v1/payments/verify-manual",
            json={"paymentId": payment_id, "action": "approve"},
            headers=owner_headers,
        )

        assert response.status_code == 403

    async def test_reject_leaves_tenant_without_subscription(
        self, client: AsyncClient, owner_headers, admin_headers, payment_id
    ):
        response = await client.post(
            "/api/v1/payments/verify-manual",
            json={"paymentId": payment_id, "action": "reject"},
            headers=admin_headers,
        )
        current = await client.get("/api/v1/subscriptions/current", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["payment"]["status"] == "FAILED"
        assert response.json()["subscription"] is None
        assert current.status_code == 404


class TestWebhook:
    """Provider callback authenticated by a shared secret."""

    async def test_wrong_secret_rejected(self, client: AsyncClient, payment_id):
        response = await client.post(
            "/api/v1/payments/webhook",
            json={"paymentId": payment_id, "confirmed": True},
            headers=webhook_headers("wrong"),
        )

        assert response.status_code == 401

    async def test_confirmed_webhook_activates_plan(
        self, client: AsyncClient, owner_headers, payment_id
    ):
        response = await client.post(
            "/api/v1/payments/webhook",
            json={"paymentId": payment_id, "confirmed": True, "transactionId": "txn-42"},
            headers=webhook_headers(),
        )

        assert response.status_code == 200
        assert response.json()["payment"]["transactionId"] == "txn-42"
        assert response.json()["subscription"]["status"] == "ACTIVE"

        session = (await client.get("/api/v1/session", headers=owner_headers)).json()
        assert session["subscription"]["plan"]["name"] == "Starter"
        assert session["access"]["canCreate"] is True

    async def test_duplicate_webhook_conflicts(self, client: AsyncClient, payment_id):
        payload = {"paymentId": payment_id, "confirmed": True}
        await client.post("/api/v1/payments/webhook", json=payload, headers=webhook_headers())

        response = await client.post(
            "/api/v1/payments/webhook", json=payload, headers=webhook_headers()
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "PAYMENT_ALREADY_SETTLED"

    async def test_unknown_payment(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payments/webhook",
            json={"paymentId": "pay_missing", "confirmed": True},
            headers=webhook_headers(),
        )

        assert response.status_code == 404
