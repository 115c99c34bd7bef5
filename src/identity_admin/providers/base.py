"""
identity_admin.providers.base

Contracts this service requires from its external collaborators.

Responsibilities:
- `IdentityProvider`: credentials, token verification, principal CRUD, revocation.
- `DocumentStore`: per-principal profile documents with atomic batch commit.
- Value types exchanged across those boundaries (`Principal`, `WriteBatch`).

Adapters translate their own failures into `ProviderError` / `NotFoundError` /
`AuthenticationError`; nothing above this layer sees driver exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal, Protocol

from identity_admin.auth.models import DecodedToken


def as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; everything stored by this service is UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class Principal:
    id: str
    email: str | None
    disabled: bool
    creation_time: datetime
    last_sign_in_time: datetime | None = None
    display_name: str | None = None
    email_verified: bool = False
    # Tokens issued at or before this instant are revoked.
    tokens_valid_after: datetime | None = None

    def tokens_revoked_for(self, issued_at: datetime) -> bool:
        if self.tokens_valid_after is None:
            return False
        # Compared at full precision: a token issued after a revocation in the same
        # second stays valid. Providers with whole-second `iat` err toward revoked.
        return as_utc(issued_at) <= as_utc(self.tokens_valid_after)

    def to_public(self) -> dict[str, Any]:
        return {
            "uid": self.id,
            "email": self.email,
            "displayName": self.display_name,
            "emailVerified": self.email_verified,
            "disabled": self.disabled,
            "creationTime": as_utc(self.creation_time).isoformat(),
            "lastSignInTime": (
                as_utc(self.last_sign_in_time).isoformat() if self.last_sign_in_time else None
            ),
        }


class IdentityProvider(Protocol):
    async def verify_token(self, token: str, *, check_revoked: bool = False) -> DecodedToken: ...

    async def get_principal(self, principal_id: str) -> Principal | None: ...

    async def get_principal_by_email(self, email: str) -> Principal | None: ...

    async def list_principals(self, *, limit: int) -> list[Principal]: ...

    async def update_principal(self, principal_id: str, *, disabled: bool) -> Principal: ...

    async def revoke_tokens(self, principal_id: str) -> None: ...

    async def delete_principal(self, principal_id: str) -> None: ...


@dataclass(frozen=True, slots=True)
class BatchWrite:
    op: Literal["set", "delete"]
    collection: str
    principal_id: str
    data: dict[str, Any] | None = None


@dataclass(slots=True)
class WriteBatch:
    """
    Ordered document writes committed atomically by `DocumentStore.commit`.
    """

    writes: list[BatchWrite] = field(default_factory=list)

    def set(self, collection: str, principal_id: str, data: dict[str, Any]) -> WriteBatch:
        self.writes.append(BatchWrite("set", collection, principal_id, dict(data)))
        return self

    def delete(self, collection: str, principal_id: str) -> WriteBatch:
        self.writes.append(BatchWrite("delete", collection, principal_id))
        return self

    def __len__(self) -> int:
        return len(self.writes)


class DocumentStore(Protocol):
    async def get_document(self, collection: str, principal_id: str) -> dict[str, Any] | None: ...

    async def set_document(
        self, collection: str, principal_id: str, data: dict[str, Any]
    ) -> None: ...

    async def delete_document(self, collection: str, principal_id: str) -> None: ...

    async def commit(self, batch: WriteBatch) -> None: ...


# --- Module Notes -----------------------------------------------------------
# Bundled SQL implementations live in `providers.sql_identity` and `providers.sql_documents`;
# a hosted identity platform would be integrated by another class satisfying these Protocols.
