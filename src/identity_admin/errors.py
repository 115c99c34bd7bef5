"""
identity_admin.errors

Service error taxonomy.

Responsibilities:
- Define the exceptions raised by auth, lifecycle and adapter layers.
- Carry a stable machine-readable code and the HTTP status each maps to.
"""

from __future__ import annotations

from typing import Any

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class ServiceError(Exception):
    """Base exception for the Identity Admin service."""

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Missing, invalid, expired or revoked bearer token."""

    status_code = HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        reason: str = "INVALID_TOKEN",
        should_sign_out: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("AUTHENTICATION_ERROR", message, details)
        self.reason = reason
        self.should_sign_out = should_sign_out


class AuthorizationError(ServiceError):
    status_code = HTTP_403_FORBIDDEN

    def __init__(
        self, message: str = "Admin access required", details: dict[str, Any] | None = None
    ) -> None:
        super().__init__("AUTHORIZATION_ERROR", message, details)


class NotFoundError(ServiceError):
    status_code = HTTP_404_NOT_FOUND

    def __init__(self, message: str = "User not found", details: dict[str, Any] | None = None):
        super().__init__("NOT_FOUND", message, details)


class RequestValidationFailed(ServiceError):
    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid request", details: dict[str, Any] | None = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ProviderError(ServiceError):
    """An identity-provider or document-store call failed unexpectedly."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        provider: str,
        message: str = "Provider call failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("PROVIDER_ERROR", f"{provider}: {message}", details)
        self.provider = provider


# --- Module Notes -----------------------------------------------------------
# Partial failure is not an exception here: lifecycle and bulk operations report it as
# data (see `services.results.OperationResult`).
