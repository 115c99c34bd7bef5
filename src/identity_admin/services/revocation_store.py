"""
identity_admin.services.revocation_store

Tombstone store used for real-time revocation detection.

Responsibilities:
- Idempotent `upsert_tombstone` keyed by principal id (own transaction per call).
- `get_tombstone` lookup for the session probe.
- Read-only paging/count for archival export.

Tombstones are permanent: no delete or expiry path exists in this service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.db.models import Tombstone, utcnow
from identity_admin.db.repositories.tombstones import TombstoneRepo
from identity_admin.db.session import transaction
from identity_admin.providers.base import as_utc

_PROVIDER = "revocation-store"


@dataclass(frozen=True, slots=True)
class TombstoneRecord:
    principal_id: str
    email: str | None
    deleted_at: datetime
    deleted_by: str

    @classmethod
    def from_row(cls, row: Tombstone) -> TombstoneRecord:
        return cls(
            principal_id=row.principal_id,
            email=row.email,
            deleted_at=as_utc(row.deleted_at),
            deleted_by=row.deleted_by,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "principalId": self.principal_id,
            "email": self.email,
            "deletedAt": self.deleted_at.isoformat(),
            "deletedBy": self.deleted_by,
        }


class RevocationStore:
    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def upsert_tombstone(
        self,
        principal_id: str,
        *,
        email: str | None,
        deleted_by: str,
        deleted_at: datetime | None = None,
    ) -> TombstoneRecord:
        stamp = deleted_at or utcnow()
        if stamp.tzinfo is not None:
            stamp = as_utc(stamp).replace(tzinfo=None)
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            row = await TombstoneRepo(session).upsert(
                principal_id=principal_id,
                email=email,
                deleted_at=stamp,
                deleted_by=deleted_by,
            )
            return TombstoneRecord.from_row(row)

    async def get_tombstone(self, principal_id: str) -> TombstoneRecord | None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            row = await TombstoneRepo(session).get(principal_id)
            return TombstoneRecord.from_row(row) if row is not None else None

    async def list_tombstones(self, *, limit: int = 100, offset: int = 0) -> list[TombstoneRecord]:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rows = await TombstoneRepo(session).page(limit=limit, offset=offset)
            return [TombstoneRecord.from_row(r) for r in rows]

    async def count_tombstones(self) -> int:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            return await TombstoneRepo(session).count()
