"""
identity_admin.api.errors

Exception handlers rendering the service error envelope.

Responsibilities:
- Map `ServiceError` subclasses to their HTTP status.
- Map request-body validation failures to 400.
- Convert anything unexpected into a logged 500.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from identity_admin.errors import AuthenticationError, ServiceError
from identity_admin.observability.logging import get_logger

log = get_logger(__name__)


def now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def error_body(
    *, error: str, code: str, details: dict[str, Any] | None = None, **extra: Any
) -> dict[str, Any]:
    return {
        "success": False,
        "error": error,
        "code": code,
        "details": details or {},
        **extra,
        "timestamp": now_iso(),
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def _service_error(_: Request, exc: ServiceError) -> JSONResponse:
        extra: dict[str, Any] = {}
        if isinstance(exc, AuthenticationError):
            extra["reason"] = exc.reason
            if exc.should_sign_out:
                extra["shouldSignOut"] = True
        level = log.error if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR else log.info
        level("request_failed", code=exc.code, status_code=exc.status_code, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(
                error_body(error=exc.message, code=exc.code, details=exc.details, **extra)
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                error_body(
                    error="Invalid request",
                    code="VALIDATION_ERROR",
                    details={"errors": exc.errors()},
                )
            ),
        )

    @app.exception_handler(Exception)
    async def _unhandled(_: Request, exc: Exception) -> JSONResponse:
        log.error("unhandled_exception", error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(error="Internal server error", code="INTERNAL_ERROR"),
        )
