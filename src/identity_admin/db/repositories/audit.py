"""
identity_admin.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events for administrative actions.
- Query the trail newest-first, optionally for one target.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_admin.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        actor: str,
        event_type: str,
        target_id: str,
        details: dict[str, Any],
    ) -> AuditEvent:
        # Audit events are append-only (no update/delete) in normal operation.
        ev = AuditEvent(
            actor=actor,
            event_type=event_type,
            target_id=target_id,
            details=details,
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def recent(self, *, target_id: str | None = None, limit: int = 200) -> list[AuditEvent]:
        stmt = select(AuditEvent).order_by(desc(AuditEvent.created_at)).limit(limit)
        if target_id is not None:
            stmt = stmt.where(AuditEvent.target_id == target_id)
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Written once per delete/toggle by `services.audit_log.AuditLog`; keep queries indexed.
