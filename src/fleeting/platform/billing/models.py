"""
Base billing models.

Provides foundation for all entitlement engine components.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id(prefix: str) -> str:
    """Generate a prefixed identifier such as ``plan_3f9c...``."""
    return f"{prefix}_{uuid4().hex[:24]}"


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class BillingBaseModel(BaseModel):
    """Base model for all billing entities."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )


class TenantScopedModel(BillingBaseModel):
    """Billing entity owned by a tenant aggregate."""

    tenant_id: str = Field(description="Tenant identifier for multi-tenancy")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


__all__ = [
    "BillingBaseModel",
    "TenantScopedModel",
    "generate_id",
    "utcnow",
    "ensure_aware",
]
