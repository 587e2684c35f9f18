"""
Model registry.

Importing this module registers every table with ``Base.metadata`` so
``create_all`` and Alembic autogenerate see the full schema.
"""

from fleeting.platform.billing.payments.models import PaymentIntentTable
from fleeting.platform.billing.plans.models import PlanTable
from fleeting.platform.billing.subscriptions.models import (
    SubscriptionEventTable,
    SubscriptionTable,
)
from fleeting.platform.billing.usage.models import SubcategoryCounterTable, UsageCounterTable
from fleeting.platform.commerce.models import (
    CategoryTable,
    OrderTable,
    ProductTable,
    SubcategoryTable,
)
from fleeting.platform.db import Base
from fleeting.platform.tenant.models import TenantNotificationTable, TenantTable

__all__ = [
    "Base",
    "CategoryTable",
    "OrderTable",
    "PaymentIntentTable",
    "PlanTable",
    "ProductTable",
    "SubcategoryCounterTable",
    "SubcategoryTable",
    "SubscriptionEventTable",
    "SubscriptionTable",
    "TenantNotificationTable",
    "TenantTable",
    "UsageCounterTable",
]
