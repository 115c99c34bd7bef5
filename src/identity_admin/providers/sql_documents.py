"""
identity_admin.providers.sql_documents

SQL-backed profile document store (bundled reference implementation).

Responsibilities:
- get/set/delete a JSON document addressed by (collection, principal id).
- Commit a `WriteBatch` atomically in a single transaction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.db.models import ProfileDocument, utcnow
from identity_admin.db.session import transaction
from identity_admin.providers.base import BatchWrite, WriteBatch

_PROVIDER = "documents"


class SqlDocumentStore:
    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get_document(self, collection: str, principal_id: str) -> dict[str, Any] | None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            doc = await self._find(session, collection, principal_id)
            return dict(doc.data) if doc is not None else None

    async def set_document(self, collection: str, principal_id: str, data: dict[str, Any]) -> None:
        await self.commit(WriteBatch().set(collection, principal_id, data))

    async def delete_document(self, collection: str, principal_id: str) -> None:
        await self.commit(WriteBatch().delete(collection, principal_id))

    async def commit(self, batch: WriteBatch) -> None:
        # All writes land or none do; deleting a missing document is a no-op.
        if not batch.writes:
            return
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            for write in batch.writes:
                await self._apply(session, write)

    async def _apply(self, session: AsyncSession, write: BatchWrite) -> None:
        if write.op == "delete":
            await session.execute(
                delete(ProfileDocument).where(
                    ProfileDocument.collection == write.collection,
                    ProfileDocument.principal_id == write.principal_id,
                )
            )
            return

        existing = await self._find(session, write.collection, write.principal_id)
        if existing is not None:
            existing.data = dict(write.data or {})
            existing.updated_at = utcnow()
        else:
            session.add(
                ProfileDocument(
                    collection=write.collection,
                    principal_id=write.principal_id,
                    data=dict(write.data or {}),
                )
            )
        await session.flush()

    @staticmethod
    async def _find(
        session: AsyncSession, collection: str, principal_id: str
    ) -> ProfileDocument | None:
        stmt = select(ProfileDocument).where(
            ProfileDocument.collection == collection,
            ProfileDocument.principal_id == principal_id,
        )
        return (await session.execute(stmt)).scalar_one_or_none()
