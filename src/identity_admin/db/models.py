"""
identity_admin.db.models

Persistence schema.

Responsibilities:
- Tombstone: permanent marker that a principal was administratively deleted.
- AuditEvent: append-only record of administrative actions.
- PrincipalRecord / ProfileDocument: tables backing the bundled identity provider and
  document store adapters.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Index, String, UniqueConstraint, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from identity_admin.db.base import Base


def utcnow() -> datetime:
    # Persist naive UTC timestamps; readers re-attach UTC (see `providers.base.as_utc`).
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _new_uid() -> str:
    return uuid.uuid4().hex


class Tombstone(Base):
    __tablename__ = "tombstones"

    # One row per principal; upserts overwrite metadata, nothing deletes rows.
    principal_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    deleted_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)
    deleted_by: Mapped[str] = mapped_column(String(320), nullable=False)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    actor: Mapped[str] = mapped_column(String(320), nullable=False)  # admin email / system
    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    target_id: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)


class PrincipalRecord(Base):
    __tablename__ = "principals"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_uid)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(nullable=True)
    tokens_valid_after: Mapped[datetime | None] = mapped_column(nullable=True)


class ProfileDocument(Base):
    __tablename__ = "profile_documents"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    principal_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("collection", "principal_id", name="uq_profile_collection_principal"),
        Index("ix_profile_collection_principal", "collection", "principal_id"),
    )


# --- Module Notes -----------------------------------------------------------
# `tombstones` is the only table this service owns durably. The other tables exist so
# the service runs self-contained; a hosted provider/store would replace them.
