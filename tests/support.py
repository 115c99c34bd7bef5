"""
tests.support

Test doubles shared across the suite.

Responsibilities:
- Wrap the bundled SQL adapters to record calls and inject provider failures.
- Build settings pointing at a throwaway SQLite file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from identity_admin.auth.models import DecodedToken
from identity_admin.errors import ProviderError
from identity_admin.providers.base import Principal, WriteBatch
from identity_admin.providers.sql_documents import SqlDocumentStore
from identity_admin.providers.sql_identity import SqlIdentityProvider
from identity_admin.services.revocation_store import RevocationStore
from identity_admin.settings import Settings

ADMIN_EMAIL = "admin@example.com"

MUTATING_CALLS = frozenset(
    {"update_principal", "revoke_tokens", "delete_principal", "commit", "upsert_tombstone"}
)


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "env": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'identity_admin.db'}",
        "admin_emails": [ADMIN_EMAIL],
        "retry_base_delay": 0.0,
        "retry_max_delay": 0.0,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


class ScriptedIdentityProvider:
    """
    Delegates to a real provider; records every call and fails on request.
    """

    def __init__(self, inner: SqlIdentityProvider) -> None:
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self.fail_delete_for: set[str] = set()
        self.fail_revoke_for: set[str] = set()
        self.revoke_failures_remaining = 0

    def __getattr__(self, name: str) -> Any:
        # create_principal / issue_token and other bundled-only helpers.
        return getattr(self.inner, name)

    async def verify_token(self, token: str, *, check_revoked: bool = False) -> DecodedToken:
        self.calls.append(("verify_token", ""))
        return await self.inner.verify_token(token, check_revoked=check_revoked)

    async def get_principal(self, principal_id: str) -> Principal | None:
        self.calls.append(("get_principal", principal_id))
        return await self.inner.get_principal(principal_id)

    async def get_principal_by_email(self, email: str) -> Principal | None:
        self.calls.append(("get_principal_by_email", email))
        return await self.inner.get_principal_by_email(email)

    async def list_principals(self, *, limit: int) -> list[Principal]:
        self.calls.append(("list_principals", str(limit)))
        return await self.inner.list_principals(limit=limit)

    async def update_principal(self, principal_id: str, *, disabled: bool) -> Principal:
        self.calls.append(("update_principal", principal_id))
        return await self.inner.update_principal(principal_id, disabled=disabled)

    async def revoke_tokens(self, principal_id: str) -> None:
        self.calls.append(("revoke_tokens", principal_id))
        if principal_id in self.fail_revoke_for:
            raise ProviderError("identity", "revoke unavailable")
        if self.revoke_failures_remaining > 0:
            self.revoke_failures_remaining -= 1
            raise ProviderError("identity", "transient revoke failure")
        await self.inner.revoke_tokens(principal_id)

    async def delete_principal(self, principal_id: str) -> None:
        self.calls.append(("delete_principal", principal_id))
        if principal_id in self.fail_delete_for:
            raise ProviderError("identity", "delete rejected")
        await self.inner.delete_principal(principal_id)

    def mutations(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]


class ScriptedDocumentStore:
    def __init__(self, inner: SqlDocumentStore) -> None:
        self.inner = inner
        self.batches: list[WriteBatch] = []
        self.fail_commit = False

    async def get_document(self, collection: str, principal_id: str) -> dict[str, Any] | None:
        return await self.inner.get_document(collection, principal_id)

    async def set_document(self, collection: str, principal_id: str, data: dict[str, Any]) -> None:
        await self.inner.set_document(collection, principal_id, data)

    async def delete_document(self, collection: str, principal_id: str) -> None:
        await self.inner.delete_document(collection, principal_id)

    async def commit(self, batch: WriteBatch) -> None:
        self.batches.append(batch)
        if self.fail_commit:
            raise ProviderError("documents", "batch commit failed")
        await self.inner.commit(batch)


class FailingRevocationStore(RevocationStore):
    """
    Real tombstone store whose writes fail a configurable number of times.
    """

    def __init__(self, *args: Any, failures: int = 0, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.failures_remaining = failures
        self.upsert_attempts = 0

    async def upsert_tombstone(self, principal_id: str, **kwargs: Any):  # type: ignore[override]
        self.upsert_attempts += 1
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise ProviderError("revocation-store", "tombstone write failed")
        return await super().upsert_tombstone(principal_id, **kwargs)
