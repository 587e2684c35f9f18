"""
Centralized router registration for all API endpoints.

All routes except the public plan catalog, the payment webhook and health
checks require authentication.
"""

import importlib
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from fastapi import Depends, FastAPI

from fleeting.platform.auth.core import get_current_user

logger = structlog.get_logger(__name__)


@dataclass
class RouterConfig:
    """Configuration for a router to be registered."""

    module_path: str
    router_name: str
    prefix: str
    tags: Sequence[str | Enum] | None
    requires_auth: bool = True
    description: str = ""


ROUTER_CONFIGS = [
    RouterConfig(
        module_path="fleeting.platform.billing.entitlements.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Session"],
        description="Session bundle (/session, /auth/validate-session)",
    ),
    RouterConfig(
        module_path="fleeting.platform.billing.plans.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Plans"],
        requires_auth=False,
        description="Plan catalog (public reads, admin writes)",
    ),
    RouterConfig(
        module_path="fleeting.platform.billing.subscriptions.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Subscriptions"],
        description="Subscription lifecycle",
    ),
    RouterConfig(
        module_path="fleeting.platform.billing.payments.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Payments"],
        description="Payment history and manual verification",
    ),
    RouterConfig(
        module_path="fleeting.platform.billing.payments.router",
        router_name="webhook_router",
        prefix="/api/v1",
        tags=["Payments"],
        requires_auth=False,
        description="Payment provider webhook",
    ),
    RouterConfig(
        module_path="fleeting.platform.commerce.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Commerce"],
        description="Guarded storefront resources",
    ),
    RouterConfig(
        module_path="fleeting.platform.tenant.router",
        router_name="router",
        prefix="/api/v1",
        tags=["Tenant"],
        description="Tenant settings",
    ),
]


def _register_router(app: FastAPI, config: RouterConfig) -> None:
    """Register a single router with the application.

    Import errors propagate: every configured router is part of the service.
    """
    module = importlib.import_module(config.module_path)
    router = getattr(module, config.router_name)

    dependencies = [Depends(get_current_user)] if config.requires_auth else None
    router_tags = list(config.tags) if config.tags is not None else None

    app.include_router(
        router,
        prefix=config.prefix,
        tags=router_tags,
        dependencies=dependencies,
    )
    logger.debug("router.registered", router=config.description, prefix=config.prefix)


def register_routers(app: FastAPI) -> None:
    """Register all API routers with the application."""
    for config in ROUTER_CONFIGS:
        _register_router(app, config)
    logger.info("routers.registered", count=len(ROUTER_CONFIGS))


def get_api_info() -> dict[str, Any]:
    """Registered routers, for the /api/v1/info endpoint."""
    return {
        "version": "v1",
        "routers": [
            {
                "module": config.module_path.rsplit(".", 2)[-2],
                "tags": list(config.tags or []),
                "requires_auth": config.requires_auth,
                "description": config.description,
            }
            for config in ROUTER_CONFIGS
        ],
    }


__all__ = ["RouterConfig", "ROUTER_CONFIGS", "register_routers", "get_api_info"]
