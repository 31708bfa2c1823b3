"""
Request tracing for the studio API.

Each request gets an id, taken from ``X-Request-ID`` when the caller sends
one, that is echoed on the response and attached to the access log line
together with the studio the request addressed, if any.
"""

import logging
import re
import time
import uuid
from typing import Awaitable, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# /api/studios/{studio_id}[/...], excluding the collection level routes
_STUDIO_PATH = re.compile(r"^/api/studios/(?!search$|run-plugins$)([^/]+)")


def get_request_id(request: Request) -> str:
    """Get the id assigned to a request, or ``"unknown"`` outside tracing."""
    return getattr(request.state, "request_id", None) or "unknown"


def studio_id_from_path(path: str) -> Optional[str]:
    """Get the studio id addressed by a path."""
    match = _STUDIO_PATH.match(path)
    return match.group(1) if match else None


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and writes one access log line per request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} "
            f"{elapsed_ms:.1f}ms",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "studio_id": studio_id_from_path(request.url.path),
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 1),
            },
        )
        return response
