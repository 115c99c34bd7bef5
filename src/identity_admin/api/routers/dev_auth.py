from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from identity_admin.api.deps import services_dep, settings_dep
from identity_admin.container import Services
from identity_admin.errors import NotFoundError
from identity_admin.providers.sql_identity import SqlIdentityProvider
from identity_admin.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevPrincipalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3, max_length=320)
    display_name: str | None = Field(default=None, alias="displayName", max_length=256)
    email_verified: bool = Field(default=False, alias="emailVerified")


class DevTokenRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def _bundled_provider(settings: Settings, services: Services) -> SqlIdentityProvider:
    # Dev routes only exist outside prod and only for the bundled provider.
    if settings.env == "prod" or not isinstance(services.identity, SqlIdentityProvider):
        raise NotFoundError("Not found")
    return services.identity


@router.post("/principals")
async def create_dev_principal(
    body: DevPrincipalRequest,
    settings: Settings = Depends(settings_dep),
    services: Services = Depends(services_dep),
) -> dict[str, Any]:
    provider = _bundled_provider(settings, services)
    principal = await provider.create_principal(
        email=body.email,
        display_name=body.display_name,
        email_verified=body.email_verified,
    )
    return principal.to_public()


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
    services: Services = Depends(services_dep),
) -> DevTokenResponse:
    provider = _bundled_provider(settings, services)
    principal = await provider.get_principal_by_email(body.email)
    if principal is None:
        raise NotFoundError(details={"email": body.email})
    token = await provider.issue_token(principal.id, ttl=timedelta(minutes=body.ttl_minutes))
    return DevTokenResponse(access_token=token)
