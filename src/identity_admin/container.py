"""
identity_admin.container

Composition of collaborators and services.

Responsibilities:
- Build the service graph once per app from `Settings` and a session factory.
- Allow the identity provider / document store to be swapped (hosted adapters, tests).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.auth.gate import AuthGate
from identity_admin.auth.jwt import JwtConfig
from identity_admin.auth.policy import AdminPolicy
from identity_admin.auth.verifier import TokenVerifier
from identity_admin.providers.base import DocumentStore, IdentityProvider
from identity_admin.providers.sql_documents import SqlDocumentStore
from identity_admin.providers.sql_identity import SqlIdentityProvider
from identity_admin.services.audit_log import AuditLog
from identity_admin.services.bulk import BulkOperationExecutor
from identity_admin.services.directory import UserDirectory
from identity_admin.services.lifecycle import IdentityLifecycleManager
from identity_admin.services.probe import RevocationProbe
from identity_admin.services.retry import RetryPolicy
from identity_admin.services.revocation_store import RevocationStore
from identity_admin.settings import Settings


@dataclass(slots=True)
class Services:
    identity: IdentityProvider
    documents: DocumentStore
    revocations: RevocationStore
    audit: AuditLog
    gate: AuthGate
    lifecycle: IdentityLifecycleManager
    bulk: BulkOperationExecutor
    probe: RevocationProbe
    directory: UserDirectory


def build_services(
    *,
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    identity: IdentityProvider | None = None,
    documents: DocumentStore | None = None,
) -> Services:
    identity = identity or SqlIdentityProvider(
        session_factory=session_factory,
        jwt_cfg=JwtConfig.from_settings(settings),
        token_ttl=timedelta(minutes=settings.token_ttl_minutes),
    )
    documents = documents or SqlDocumentStore(session_factory=session_factory)
    revocations = RevocationStore(session_factory=session_factory)
    audit = AuditLog(session_factory=session_factory)
    verifier = TokenVerifier(identity)

    lifecycle = IdentityLifecycleManager(
        identity=identity,
        documents=documents,
        revocations=revocations,
        audit=audit,
        retry_policy=RetryPolicy.from_settings(settings),
        profile_collections=settings.profile_collections,
    )
    return Services(
        identity=identity,
        documents=documents,
        revocations=revocations,
        audit=audit,
        gate=AuthGate(verifier=verifier, policy=AdminPolicy(settings.admin_emails)),
        lifecycle=lifecycle,
        bulk=BulkOperationExecutor(lifecycle, max_concurrency=settings.bulk_max_concurrency),
        probe=RevocationProbe(verifier=verifier, identity=identity, revocations=revocations),
        directory=UserDirectory(
            identity=identity,
            documents=documents,
            profile_collections=settings.profile_collections,
            list_limit=settings.list_users_limit,
        ),
    )


# --- Module Notes -----------------------------------------------------------
# Nothing here is mutated after startup; requests only read from the graph.
