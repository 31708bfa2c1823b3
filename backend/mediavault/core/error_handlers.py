"""
JSON error responses for the studio API.

Every error uses the same body::

    {"error": {"message", "error_code", "details", "request_id"}}

Batch plugin failures also put ``failed_ids`` and ``updated_ids`` at the
top of the error, and side effect failures their ``stage`` and
``studio_id``, so clients can act on partial results without digging
through ``details``.
"""

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediavault.core.exceptions import (
    CascadeSideEffectError,
    HookExecutionError,
    MediaVaultException,
)
from mediavault.core.middleware import REQUEST_ID_HEADER, get_request_id

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    **fields: Any,
) -> JSONResponse:
    """Build the JSON error body shared by every handler."""
    request_id = get_request_id(request)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "message": message,
                "error_code": error_code,
                "details": details or {},
                "request_id": request_id,
                **fields,
            }
        },
        headers={REQUEST_ID_HEADER: request_id},
    )


def _studio_fields(exc: MediaVaultException) -> Dict[str, Any]:
    if isinstance(exc, HookExecutionError):
        return {"failed_ids": exc.failed_ids, "updated_ids": exc.updated_ids}
    if isinstance(exc, CascadeSideEffectError):
        return {"stage": exc.stage, "studio_id": exc.studio_id}
    return {}


async def mediavault_exception_handler(
    request: Request, exc: MediaVaultException
) -> JSONResponse:
    """Map service errors to their status code and error body."""
    fields = _studio_fields(exc)
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.error_code}: {exc.message}",
        extra={
            "request_id": get_request_id(request),
            "status_code": exc.status_code,
            **fields,
        },
    )
    return error_response(
        request, exc.status_code, exc.error_code, exc.message, exc.details, **fields
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body and query errors as 422 with one entry per field."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body"),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Rejected {request.method} {request.url.path}: {len(errors)} invalid fields",
        extra={"request_id": get_request_id(request), "errors": errors},
    )
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Validation error",
        {"errors": errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors such as unknown paths and wrong methods."""
    try:
        error_code = HTTPStatus(exc.status_code).name
    except ValueError:
        error_code = "HTTP_ERROR"
    return error_response(request, exc.status_code, error_code, str(exc.detail))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything the services did not turn into a ``MediaVaultException``."""
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        extra={"request_id": get_request_id(request)},
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: "FastAPI") -> None:
    """Install the handlers above on an application."""
    app.add_exception_handler(MediaVaultException, mediavault_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)
