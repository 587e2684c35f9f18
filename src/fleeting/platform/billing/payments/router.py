"""
Payment confirmation router.

Store owners read their payment history. Operators verify manual payments;
the provider reports outcomes through the webhook, authenticated with a
shared secret header.
"""

import hmac
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from fleeting.platform.auth.core import UserInfo, require_platform_admin
from fleeting.platform.billing.dependencies import TenantId, get_lifecycle, get_payment_service
from fleeting.platform.billing.payments.models import (
    ManualVerificationAction,
    ManualVerificationRequest,
    PaymentConfirmation,
    PaymentIntent,
    PaymentWebhookPayload,
)
from fleeting.platform.billing.payments.service import PaymentService
from fleeting.platform.billing.subscriptions.service import SubscriptionLifecycle
from fleeting.platform.logging import audit
from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/payments")

# Mounted without the bearer dependency; the provider authenticates with a secret
webhook_router = APIRouter(prefix="/payments")

Payments = Annotated[PaymentService, Depends(get_payment_service)]
Lifecycle = Annotated[SubscriptionLifecycle, Depends(get_lifecycle)]


@router.get("/history", response_model=list[PaymentIntent])
async def payment_history(tenant_id: TenantId, payments: Payments) -> list[PaymentIntent]:
    return await payments.history(tenant_id)


@router.post("/verify-manual", response_model=PaymentConfirmation)
async def verify_manual_payment(
    data: ManualVerificationRequest,
    admin: Annotated[UserInfo, Depends(require_platform_admin)],
    lifecycle: Lifecycle,
) -> PaymentConfirmation:
    """Approve or reject a pending manual payment."""
    confirmed = data.action == ManualVerificationAction.APPROVE
    confirmation = await lifecycle.confirm_payment(
        data.payment_id, confirmed, transaction_id=data.transaction_id, user_id=admin.user_id
    )
    audit(
        "payment.manual_verification",
        tenant_id=confirmation.payment.tenant_id,
        actor_id=admin.user_id,
        resource="payment",
        resource_id=data.payment_id,
        decision=data.action.value,
    )
    return confirmation


@router.get("/{payment_id}", response_model=PaymentIntent)
async def get_payment(payment_id: str, tenant_id: TenantId, payments: Payments) -> PaymentIntent:
    return await payments.get(tenant_id, payment_id)


@webhook_router.post("/webhook", response_model=PaymentConfirmation)
async def payment_webhook(
    payload: PaymentWebhookPayload, request: Request, lifecycle: Lifecycle
) -> PaymentConfirmation:
    """Boolean payment outcome from the provider."""
    secret = request.headers.get(settings.billing.payment_webhook_header, "")
    if not hmac.compare_digest(secret, settings.billing.payment_webhook_secret):
        logger.warning("payment.webhook_rejected", payment_id=payload.payment_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook secret")

    return await lifecycle.confirm_payment(
        payload.payment_id, payload.confirmed, transaction_id=payload.transaction_id
    )


__all__ = ["router", "webhook_router"]
