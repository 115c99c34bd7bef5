"""
identity_admin.auth.models

Auth domain models.

Responsibilities:
- Define the decoded credential (`DecodedToken`) returned by token verification.
- Define the authenticated admin identity (`AdminContext`) injected into admin endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class DecodedToken:
    principal_id: str
    email: str | None
    issued_at: datetime


@dataclass(frozen=True, slots=True)
class AdminContext:
    """
    Caller admitted by the admin gate.
    """

    principal_id: str
    email: str


# --- Module Notes -----------------------------------------------------------
# Neither model is persisted; tokens are never stored by this service.
