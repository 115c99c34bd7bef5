"""
identity_admin.observability.middleware

Request-scoped logging context.

Responsibilities:
- Accept or mint an `x-request-id` and echo it on the response.
- Bind request id / method / path into structlog contextvars for every log line.
- Emit one access line per request; probe traffic is logged at debug.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from identity_admin.observability.logging import get_logger

log = get_logger(__name__)

_PROBE_PATHS = frozenset({"/health", "/readyz"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        path = request.url.path
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=path
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            emit = log.debug if path in _PROBE_PATHS else log.info
            emit("request_completed", status_code=response.status_code, duration_ms=elapsed_ms)
        finally:
            # Context must not leak into the next request served by this task.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# `auth.deps.require_admin` binds `actor` after admission, so lifecycle log lines name the
# acting admin without threading it through every call.
