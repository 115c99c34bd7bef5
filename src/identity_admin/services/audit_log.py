from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.db.repositories.audit import AuditRepo
from identity_admin.db.session import transaction
from identity_admin.errors import ProviderError
from identity_admin.observability.logging import get_logger
from identity_admin.providers.base import as_utc

log = get_logger(__name__)


class AuditLog:
    """
    Append-only trail of administrative actions. Recording is best-effort: a failed
    audit write is logged and never changes the outcome of the action it describes.
    """

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def record(
        self,
        *,
        actor: str,
        event_type: str,
        target_id: str,
        details: dict[str, Any] | None = None,
    ) -> bool:
        try:
            async with transaction(self._sessions, provider="audit") as session:
                await AuditRepo(session).add(
                    actor=actor,
                    event_type=event_type,
                    target_id=target_id,
                    details=details or {},
                )
        except ProviderError as e:
            log.warning(
                "audit_write_failed", event_type=event_type, target_id=target_id, error=str(e)
            )
            return False
        return True

    async def recent(
        self, *, target_id: str | None = None, limit: int = 200
    ) -> list[dict[str, Any]]:
        async with transaction(self._sessions, provider="audit") as session:
            events = await AuditRepo(session).recent(target_id=target_id, limit=limit)
            return [
                {
                    "id": str(e.id),
                    "actor": e.actor,
                    "eventType": e.event_type,
                    "targetId": e.target_id,
                    "details": e.details,
                    "createdAt": as_utc(e.created_at).isoformat(),
                }
                for e in events
            ]
