"""
identity_admin.db.repositories.tombstones

Repository for `Tombstone` entities.

Responsibilities:
- Upsert tombstones keyed by principal id.
- Read a single tombstone, or page through all of them for archival export.

There is intentionally no delete method.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_admin.db.models import Tombstone


class TombstoneRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(
        self,
        *,
        principal_id: str,
        email: str | None,
        deleted_at: datetime,
        deleted_by: str,
    ) -> Tombstone:
        existing = await self._session.get(Tombstone, principal_id)
        if existing is not None:
            existing.email = email
            existing.deleted_at = deleted_at
            existing.deleted_by = deleted_by
            await self._session.flush()
            return existing

        tomb = Tombstone(
            principal_id=principal_id,
            email=email,
            deleted_at=deleted_at,
            deleted_by=deleted_by,
        )
        self._session.add(tomb)
        await self._session.flush()
        return tomb

    async def get(self, principal_id: str) -> Tombstone | None:
        return await self._session.get(Tombstone, principal_id)

    async def page(self, *, limit: int = 100, offset: int = 0) -> list[Tombstone]:
        stmt = (
            select(Tombstone)
            .order_by(desc(Tombstone.deleted_at), Tombstone.principal_id)
            .limit(limit)
            .offset(offset)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def count(self) -> int:
        stmt = select(func.count(Tombstone.principal_id))
        return int((await self._session.execute(stmt)).scalar_one())
