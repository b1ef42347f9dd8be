"""
Domain and downstream error handlers.

``VisitSchedulerError`` subclasses carry their own status code. They are
returned as an error body naming the error class, so clients can tell an
over-capacity booking from a plain validation failure.
"""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from visit_scheduler.clients import ApiClientError
from visit_scheduler.core.exceptions import VisitSchedulerError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.monitoring import track_event

logger = get_logger(__name__)


def error_body(
    status: int, user_message: str, developer_message: Optional[str] = None, error_code: Optional[str] = None
) -> Dict[str, Any]:
    return {
        "status": status,
        "user_message": user_message,
        "developer_message": developer_message or user_message,
        "error_code": error_code,
    }


async def domain_exception_handler(request: Request, exc: VisitSchedulerError) -> JSONResponse:
    """Translate a domain error into its status code and error body."""
    if exc.status_code == 400:
        track_event(
            "bad-request-error",
            {"path": request.url.path, "method": request.method, "error": type(exc).__name__, "message": exc.message},
        )
        logger.info(f"Bad request on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

    developer_message = f"{exc.message} {exc.details}" if exc.details else exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, developer_message, type(exc).__name__),
    )


async def api_client_exception_handler(request: Request, exc: ApiClientError) -> JSONResponse:
    """A downstream prison system failed; report it as a bad gateway."""
    logger.error(
        f"Downstream API failure in {request.method} {request.url.path}: {exc}",
        extra={"status_code": exc.status_code, "details": exc.details},
    )
    return JSONResponse(
        status_code=502,
        content=error_body(502, "A downstream service failed", str(exc), type(exc).__name__),
    )
