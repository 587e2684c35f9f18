"""
Tenant aggregate models.

A tenant is a store owner account: the unit of subscription and quota
isolation. Trial history lives on the tenant so it survives subscription
row changes.
"""

from datetime import datetime

from pydantic import Field
from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleeting.platform.billing.models import BillingBaseModel
from fleeting.platform.db import Base, StrictTenantMixin, TimestampMixin


class TenantTable(Base, TimestampMixin):
    """SQLAlchemy table for tenants."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    has_used_trial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_domain: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)


class TenantNotificationTable(Base, StrictTenantMixin, TimestampMixin):
    """In-app notifications shown on the dashboard."""

    __tablename__ = "tenant_notifications"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)


class Tenant(BillingBaseModel):
    id: str
    name: str
    has_used_trial: bool = False
    custom_domain: str | None = None
    created_at: datetime | None = None


class TenantNotification(BillingBaseModel):
    id: str
    tenant_id: str
    title: str
    body: str = ""
    is_read: bool = False
    created_at: datetime | None = None


class CustomDomainRequest(BillingBaseModel):
    domain: str = Field(
        min_length=3,
        max_length=255,
        pattern=r"^([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$",
    )


__all__ = [
    "TenantTable",
    "TenantNotificationTable",
    "Tenant",
    "TenantNotification",
    "CustomDomainRequest",
]
