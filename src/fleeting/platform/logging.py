"""
Structured logging for the entitlement engine.

Modules log through ``structlog.get_logger(__name__)`` with event-style
names. Request context bound by the middleware (correlation id, method,
path) is merged into every record. Audit records for plan catalog edits,
subscription moves and operator payment decisions go to the
``fleeting.audit`` logger.
"""

import logging
from typing import Any

import structlog

from fleeting.platform.settings import settings

AUDIT_LOGGER = "fleeting.audit"


def setup_logging() -> None:
    """Configure structlog from ``settings.observability``."""
    logging.basicConfig(format="%(message)s", level=settings.observability.log_level.value)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if settings.observability.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def audit(
    event: str,
    /,
    *,
    tenant_id: str | None,
    actor_id: str | None,
    resource: str,
    resource_id: str,
    **details: Any,
) -> None:
    """Emit an audit record.

    ``tenant_id`` is None for platform-wide changes such as plan edits;
    ``actor_id`` is None for system moves (webhook, lazy expiry).
    """
    structlog.get_logger(AUDIT_LOGGER).info(
        event,
        tenant_id=tenant_id,
        actor_id=actor_id,
        resource=resource,
        resource_id=resource_id,
        **details,
    )


# Initialize on import
setup_logging()


__all__ = ["setup_logging", "audit", "AUDIT_LOGGER"]
