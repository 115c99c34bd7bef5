"""
identity_admin.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/health`).
- Provide readiness probe (`/readyz`) that touches the tombstone store.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from identity_admin import __version__
from identity_admin.api.deps import services_dep
from identity_admin.api.errors import now_iso
from identity_admin.container import Services

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    return {"status": "OK", "timestamp": now_iso(), "server": f"Identity Admin v{__version__}"}


@router.get("/readyz")
async def readyz(services: Services = Depends(services_dep)) -> dict[str, Any]:
    # Readiness: the only store this service owns must be reachable (ProviderError -> 500).
    await services.revocations.count_tombstones()
    return {"status": "ready", "timestamp": now_iso()}
