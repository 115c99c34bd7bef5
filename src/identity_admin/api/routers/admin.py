"""
identity_admin.api.routers.admin

Administrative endpoints (admin allow-list required).

Responsibilities:
- List / inspect users.
- Delete one user, delete many users, enable/disable a user.
- Expose tombstones and the audit trail read-only.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from identity_admin.api.deps import services_dep
from identity_admin.api.errors import error_body, now_iso
from identity_admin.auth.deps import require_admin
from identity_admin.auth.models import AdminContext
from identity_admin.container import Services
from identity_admin.errors import RequestValidationFailed
from identity_admin.services.lifecycle import PrincipalRef

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DeleteUserRequest(_CamelModel):
    user_id: str | None = Field(default=None, alias="userId", max_length=128)
    email: str | None = Field(default=None, max_length=320)
    revoke_tokens: bool = Field(default=True, alias="revokeTokens")


class BulkDeleteRequest(_CamelModel):
    user_ids: list[str] = Field(default_factory=list, alias="userIds", max_length=500)
    emails: list[str] = Field(default_factory=list, max_length=500)
    revoke_tokens: bool = Field(default=True, alias="revokeTokens")


class ToggleStatusRequest(BaseModel):
    disabled: bool


@router.get("/users")
async def list_users(
    limit: int | None = Query(default=None, ge=1, le=1000),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    users = await services.directory.list_users(limit=limit)
    return {
        "success": True,
        "users": [u.to_public() for u in users],
        "totalCount": len(users),
        "timestamp": now_iso(),
    }


@router.get("/user/{user_id}")
async def get_user(user_id: str, services: Services = Depends(services_dep)) -> dict[str, Any]:
    user = await services.directory.get_user(user_id)
    return {"success": True, "user": user, "timestamp": now_iso()}


@router.post("/delete-user")
async def delete_user(
    body: DeleteUserRequest,
    admin: AdminContext = Depends(require_admin),
    services: Services = Depends(services_dep),
) -> Any:
    # The field the caller used decides how the ref is looked up; blanks do not count.
    user_id = (body.user_id or "").strip()
    email = (body.email or "").strip()
    if user_id:
        ref = PrincipalRef.by_id(user_id)
    elif email:
        ref = PrincipalRef.by_email(email)
    else:
        raise RequestValidationFailed("userId or email required")

    result = await services.lifecycle.delete_user(
        ref, actor=admin.email, revoke_tokens=body.revoke_tokens
    )
    if not result.succeeded:
        # Identity deletion is the step that stops future sign-ins; report it loudly.
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                error="Failed to delete user",
                code="DELETE_FAILED",
                details={"error": result.detail.get("error")},
                result=result.to_dict(),
            ),
        )
    return {
        "success": True,
        "message": f"User {result.detail.get('email') or ref.value} deleted successfully",
        **result.to_dict(),
        "timestamp": now_iso(),
    }


@router.post("/delete-users-bulk")
async def delete_users_bulk(
    body: BulkDeleteRequest,
    admin: AdminContext = Depends(require_admin),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    refs = [PrincipalRef.by_id(r.strip()) for r in body.user_ids if r and r.strip()]
    refs += [PrincipalRef.by_email(e.strip()) for e in body.emails if e and e.strip()]
    if not refs:
        raise RequestValidationFailed("User IDs array is required")

    summary = await services.bulk.delete_many(
        refs, actor=admin.email, revoke_tokens=body.revoke_tokens
    )
    return {
        "success": True,
        "message": (
            f"Bulk delete completed: {summary.success_count} successful, "
            f"{summary.failure_count} failed"
        ),
        **summary.to_dict(),
        "timestamp": now_iso(),
    }


@router.post("/user/{user_id}/toggle-status")
async def toggle_status(
    user_id: str,
    body: ToggleStatusRequest,
    admin: AdminContext = Depends(require_admin),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    result = await services.lifecycle.toggle_status(
        user_id, disabled=body.disabled, actor=admin.email
    )
    return {
        "success": True,
        "message": f"User {result.status.value} successfully",
        "userId": user_id,
        "disabled": result.detail["disabled"],
        "tokensRevoked": result.detail["tokensRevoked"],
        "timestamp": now_iso(),
    }


@router.get("/tombstones")
async def list_tombstones(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    records = await services.revocations.list_tombstones(limit=limit, offset=offset)
    return {
        "success": True,
        "tombstones": [r.to_dict() for r in records],
        "totalCount": await services.revocations.count_tombstones(),
        "timestamp": now_iso(),
    }


@router.get("/audit")
async def list_audit_events(
    target_id: str | None = Query(default=None, alias="targetId"),
    limit: int = Query(default=200, ge=1, le=1000),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    events = await services.audit.recent(target_id=target_id, limit=limit)
    return {"success": True, "events": events, "timestamp": now_iso()}


# --- Module Notes -----------------------------------------------------------
# Bulk deletion always answers 200: per-item failures are data in `results`.
