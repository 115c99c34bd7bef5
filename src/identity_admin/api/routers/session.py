"""
identity_admin.api.routers.session

Session validity endpoint for any authenticated client.

Responsibilities:
- Run the revocation probe for the caller's bearer token.
- Answer 401 with `shouldSignOut` and a reason code whenever the session must end.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_401_UNAUTHORIZED

from identity_admin.api.deps import services_dep
from identity_admin.api.errors import error_body
from identity_admin.container import Services

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/verify-token")
async def verify_token(request: Request, services: Services = Depends(services_dep)) -> Any:
    check = await services.probe.check_authorization(request.headers.get("authorization"))
    if check.should_sign_out:
        reason = check.reason.value if check.reason else None
        return JSONResponse(
            status_code=HTTP_401_UNAUTHORIZED,
            content=error_body(
                error=check.message or "Session is no longer valid",
                code="SESSION_REVOKED",
                valid=False,
                shouldSignOut=True,
                reason=reason,
            ),
        )
    return {"valid": True, "user": {"uid": check.principal_id, "email": check.email}}
