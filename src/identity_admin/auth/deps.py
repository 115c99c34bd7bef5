"""
identity_admin.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Run the admin gate for every `/api/admin/*` request.
- Bind the acting admin into the structlog context.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request

from identity_admin.api.deps import services_dep
from identity_admin.auth.models import AdminContext
from identity_admin.container import Services


async def require_admin(
    request: Request,
    services: Services = Depends(services_dep),
) -> AdminContext:
    # AuthenticationError / AuthorizationError are rendered by the API exception handlers.
    admin = await services.gate.admit(request.headers.get("authorization"))
    structlog.contextvars.bind_contextvars(actor=admin.email)
    return admin


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependency results per request, so routers may declare `require_admin`
# both at router level and as a parameter without re-running the gate.
