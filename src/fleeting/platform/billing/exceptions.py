"""
Entitlement engine exceptions.

Every failure the engine can report to the API boundary is a typed
exception carrying a status code, a machine-readable error code, context
and a recovery hint. Nothing here ever degrades into an implicit "allow".
"""

from typing import Any


class EntitlementError(Exception):
    """
    Base entitlement error with enhanced context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for API responses
        status_code: HTTP status code for this error type
        context: Additional context data about the error
        recovery_hint: Suggested action to resolve the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 400,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        self.message = message
        self.error_code = error_code or "ENTITLEMENT_ERROR"
        self.status_code = status_code
        self.context = context or {}
        self.recovery_hint = recovery_hint
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


class PlanNotFound(EntitlementError):
    """Plan does not exist or is not available for new sign-ups."""

    def __init__(self, message: str, plan_id: str | None = None) -> None:
        context = {}
        if plan_id:
            context["plan_id"] = plan_id

        super().__init__(
            message,
            "PLAN_NOT_FOUND",
            status_code=404,
            context=context,
            recovery_hint="Verify the plan ID and ensure it exists and is active",
        )


class PlanInUse(EntitlementError):
    """Plan deletion attempted while subscriptions still reference it."""

    def __init__(self, message: str, plan_id: str, subscription_count: int) -> None:
        super().__init__(
            message,
            "PLAN_IN_USE",
            status_code=409,
            context={"plan_id": plan_id, "subscription_count": subscription_count},
            recovery_hint="Deactivate the plan instead; it will be hidden from new sign-ups",
        )


class SubscriptionNotFound(EntitlementError):
    """Tenant has no current subscription."""

    def __init__(self, message: str, tenant_id: str | None = None) -> None:
        context = {}
        if tenant_id:
            context["tenant_id"] = tenant_id

        super().__init__(
            message,
            "SUBSCRIPTION_NOT_FOUND",
            status_code=404,
            context=context,
            recovery_hint="Select a plan or activate the free trial first",
        )


class InvalidTransition(EntitlementError):
    """Illegal subscription lifecycle move."""

    def __init__(
        self,
        current_state: str,
        attempted: str,
        message: str | None = None,
    ) -> None:
        self.current_state = current_state
        self.attempted = attempted
        super().__init__(
            message or f"Cannot {attempted} a subscription in state {current_state}",
            "INVALID_TRANSITION",
            status_code=409,
            context={"current_state": current_state, "attempted": attempted},
            recovery_hint=f"Cannot {attempted} from {current_state}. Check subscription status first.",
        )


class TrialAlreadyUsed(EntitlementError):
    """Tenant already consumed its one free trial."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            "Free trial has already been used for this store",
            "TRIAL_ALREADY_USED",
            status_code=409,
            context={"tenant_id": tenant_id},
            recovery_hint="Select a paid plan to continue",
        )


class QuotaExceeded(EntitlementError):
    """Creation blocked because the plan quota has no headroom."""

    def __init__(
        self,
        message: str,
        resource_kind: str,
        used: int,
        limit: int,
        category_id: str | None = None,
    ) -> None:
        context: dict[str, Any] = {"resource_kind": resource_kind, "used": used, "limit": limit}
        if category_id:
            context["category_id"] = category_id

        super().__init__(
            message,
            "QUOTA_EXCEEDED",
            status_code=403,
            context=context,
            recovery_hint="Upgrade your plan or remove existing items",
        )


class AccessDenied(EntitlementError):
    """No active or grace-period access for the attempted action."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message,
            "ACCESS_DENIED",
            status_code=403,
            context=context,
            recovery_hint="Renew or select a plan to restore access",
        )


class PaymentRequired(EntitlementError):
    """A non-zero plan was selected and is awaiting payment confirmation."""

    def __init__(self, message: str, payment_id: str, amount: str, currency: str) -> None:
        super().__init__(
            message,
            "PAYMENT_REQUIRED",
            status_code=402,
            context={"payment_id": payment_id, "amount": amount, "currency": currency},
            recovery_hint="Complete the payment to activate the plan",
        )


class PaymentNotFound(EntitlementError):
    """Payment intent not found for this tenant."""

    def __init__(self, message: str, payment_id: str | None = None) -> None:
        context = {}
        if payment_id:
            context["payment_id"] = payment_id

        super().__init__(
            message,
            "PAYMENT_NOT_FOUND",
            status_code=404,
            context=context,
            recovery_hint="Verify the payment ID",
        )


class PaymentStateError(EntitlementError):
    """Payment intent already settled."""

    def __init__(self, payment_id: str, status: str) -> None:
        super().__init__(
            f"Payment {payment_id} is already {status}",
            "PAYMENT_ALREADY_SETTLED",
            status_code=409,
            context={"payment_id": payment_id, "status": status},
        )


class TenantBusy(EntitlementError):
    """Timed out waiting for the tenant's entitlement lock."""

    def __init__(self, tenant_id: str, timeout: float) -> None:
        super().__init__(
            "Another change for this store is in progress, please retry",
            "TENANT_BUSY",
            status_code=409,
            context={"tenant_id": tenant_id, "timeout_seconds": timeout},
            recovery_hint="Retry the request",
        )


class ResourceNotFound(EntitlementError):
    """Tenant resource (product, category, subcategory, order) not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type.capitalize()} {resource_id} not found",
            "RESOURCE_NOT_FOUND",
            status_code=404,
            context={"resource_type": resource_type, "resource_id": resource_id},
        )



class InvalidPlacement(EntitlementError):
    """Subcategory does not belong to the category a product is placed in."""

    def __init__(self, subcategory_id: str, category_id: str) -> None:
        super().__init__(
            f"Subcategory {subcategory_id} does not belong to category {category_id}",
            "INVALID_PLACEMENT",
            status_code=422,
            context={"subcategory_id": subcategory_id, "category_id": category_id},
            recovery_hint="Pick a subcategory of the chosen category",
        )


__all__ = [
    "EntitlementError",
    "PlanNotFound",
    "PlanInUse",
    "SubscriptionNotFound",
    "InvalidTransition",
    "TrialAlreadyUsed",
    "QuotaExceeded",
    "AccessDenied",
    "PaymentRequired",
    "PaymentNotFound",
    "PaymentStateError",
    "TenantBusy",
    "ResourceNotFound",
    "InvalidPlacement",
]
