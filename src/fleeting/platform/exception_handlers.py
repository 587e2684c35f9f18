"""
Exception handlers.

Entitlement errors are rendered with their own status code and ``to_dict()``
body so clients can show ``message`` verbatim.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fleeting.platform.billing.exceptions import EntitlementError

logger = structlog.get_logger(__name__)


async def entitlement_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, EntitlementError):
        raise exc
    log = logger.warning if exc.status_code >= 409 or exc.status_code == 403 else logger.info
    log(
        "entitlement.error",
        error_code=exc.error_code,
        status_code=exc.status_code,
        path=request.url.path,
        context=exc.context,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "context": {},
            "recovery_hint": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EntitlementError, entitlement_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = ["register_exception_handlers", "entitlement_error_handler"]
