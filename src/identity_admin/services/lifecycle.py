"""
identity_admin.services.lifecycle

Identity lifecycle orchestration (delete / disable / enable one principal).

Responsibilities:
- Resolve a principal reference (explicitly an id or an email) via the identity provider.
- Run the ordered deletion sequence across provider, tombstone store and document store.
- Classify each step as fatal or best-effort through one table (`DELETE_STEPS`) consumed
  by a single runner, and report the per-step outcome.
- Toggle the disabled flag, revoking sessions on disable.

Deletion order:
1. revoke tokens        (best-effort, retried; skipped when revoke_tokens=False)
2. write tombstone      (best-effort, retried)
3. delete identity      (fatal, single attempt)
4. clean profile docs   (best-effort, retried; one atomic batch)

The tombstone is written before identity deletion, so once it lands a probing client
never sees "principal exists and no tombstone" for an accepted delete.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from identity_admin.errors import NotFoundError, RequestValidationFailed, ServiceError
from identity_admin.observability.logging import get_logger
from identity_admin.providers.base import DocumentStore, IdentityProvider, Principal, WriteBatch
from identity_admin.services.audit_log import AuditLog
from identity_admin.services.results import OperationResult, OperationStatus
from identity_admin.services.retry import SINGLE_ATTEMPT, RetryPolicy, call_with_retry
from identity_admin.services.revocation_store import RevocationStore

log = get_logger(__name__)


class Step(enum.StrEnum):
    revoke_tokens = "REVOKE_TOKENS"
    tombstone = "TOMBSTONE"
    delete_identity = "DELETE_IDENTITY"
    clean_profile = "CLEAN_PROFILE"


class StepOutcome(enum.StrEnum):
    succeeded = "SUCCEEDED"
    failed = "FAILED"
    skipped = "SKIPPED"


@dataclass(frozen=True, slots=True)
class StepPolicy:
    fatal: bool
    retry: bool


# Insertion order is execution order.
DELETE_STEPS: Mapping[Step, StepPolicy] = {
    Step.revoke_tokens: StepPolicy(fatal=False, retry=True),
    Step.tombstone: StepPolicy(fatal=False, retry=True),
    Step.delete_identity: StepPolicy(fatal=True, retry=False),
    Step.clean_profile: StepPolicy(fatal=False, retry=True),
}

# Response keys for each step's success flag.
_STEP_FLAGS: Mapping[Step, str] = {
    Step.revoke_tokens: "tokensRevoked",
    Step.tombstone: "tombstoned",
    Step.delete_identity: "identityDeleted",
    Step.clean_profile: "profileCleaned",
}

StepAction = Callable[[], Awaitable[Any]]


class RefKind(enum.StrEnum):
    id = "id"
    email = "email"


@dataclass(frozen=True, slots=True)
class PrincipalRef:
    """
    A principal as the caller named it. The kind comes from the request field, never
    from the value's shape: provider ids may contain `@`.
    """

    kind: RefKind
    value: str

    @classmethod
    def by_id(cls, value: str) -> PrincipalRef:
        return cls(RefKind.id, value)

    @classmethod
    def by_email(cls, value: str) -> PrincipalRef:
        return cls(RefKind.email, value)


@dataclass(slots=True)
class StepReport:
    outcomes: dict[Step, StepOutcome]
    errors: dict[Step, str]

    @property
    def fatal_failure(self) -> Step | None:
        for step, outcome in self.outcomes.items():
            if outcome == StepOutcome.failed and DELETE_STEPS[step].fatal:
                return step
        return None

    def flags(self) -> dict[str, bool]:
        return {
            _STEP_FLAGS[step]: outcome == StepOutcome.succeeded
            for step, outcome in self.outcomes.items()
        }


class IdentityLifecycleManager:
    def __init__(
        self,
        *,
        identity: IdentityProvider,
        documents: DocumentStore,
        revocations: RevocationStore,
        audit: AuditLog | None = None,
        retry_policy: RetryPolicy | None = None,
        profile_collections: Sequence[str] = ("userProfiles", "users"),
    ) -> None:
        self._identity = identity
        self._documents = documents
        self._revocations = revocations
        self._audit = audit
        self._retry = retry_policy or RetryPolicy()
        self._profile_collections = tuple(profile_collections)

    async def resolve(self, ref: PrincipalRef) -> Principal:
        value = (ref.value or "").strip()
        if not value:
            raise RequestValidationFailed("userId or email required")
        if ref.kind == RefKind.email:
            principal = await self._identity.get_principal_by_email(value)
        else:
            principal = await self._identity.get_principal(value)
        if principal is None:
            raise NotFoundError(details={"ref": value, "kind": ref.kind.value})
        return principal

    async def delete_user(
        self,
        ref: PrincipalRef,
        *,
        actor: str,
        revoke_tokens: bool = True,
    ) -> OperationResult:
        # Resolution failure aborts before any mutation (no tombstone for unknown refs).
        principal = await self.resolve(ref)
        pid = principal.id
        log.info(
            "user_delete_started",
            principal_id=pid,
            ref=ref.value,
            ref_kind=ref.kind.value,
            revoke_tokens=revoke_tokens,
        )

        actions: dict[Step, StepAction | None] = {
            Step.revoke_tokens: (
                (lambda: self._identity.revoke_tokens(pid)) if revoke_tokens else None
            ),
            Step.tombstone: lambda: self._revocations.upsert_tombstone(
                pid, email=principal.email, deleted_by=actor
            ),
            Step.delete_identity: lambda: self._identity.delete_principal(pid),
            Step.clean_profile: lambda: self._documents.commit(self._profile_cleanup_batch(pid)),
        }
        report = await self._run_steps(pid, actions)

        fatal = report.fatal_failure
        status = OperationStatus.deleted if fatal is None else OperationStatus.failed
        detail: dict[str, Any] = {
            "principalId": pid,
            "email": principal.email,
            **report.flags(),
            "steps": {s.value: o.value for s, o in report.outcomes.items()},
        }
        if fatal is not None:
            detail["error"] = report.errors[fatal]
        if report.errors:
            detail["stepErrors"] = {s.value: msg for s, msg in report.errors.items()}

        log.info("user_delete_finished", principal_id=pid, status=status.value, **report.flags())
        await self._record(
            actor=actor,
            event_type="USER_DELETED" if fatal is None else "USER_DELETE_FAILED",
            target_id=pid,
            details=detail,
        )
        return OperationResult(ref_id=ref.value, status=status, detail=detail)

    async def toggle_status(
        self,
        principal_id: str,
        *,
        disabled: bool,
        actor: str,
    ) -> OperationResult:
        # Not found / provider failure on the flag update propagate to the caller.
        await self._identity.update_principal(principal_id, disabled=disabled)
        log.info("user_status_updated", principal_id=principal_id, disabled=disabled)

        tokens_revoked = False
        if disabled:
            try:
                await call_with_retry(
                    lambda: self._identity.revoke_tokens(principal_id),
                    policy=self._retry,
                    operation=Step.revoke_tokens.value,
                )
                tokens_revoked = True
            except ServiceError as e:
                log.warning("token_revocation_failed", principal_id=principal_id, error=str(e))

        # Enabling leaves tokens_valid_after untouched: revoked sessions stay revoked.
        status = OperationStatus.disabled if disabled else OperationStatus.enabled
        detail = {
            "principalId": principal_id,
            "disabled": disabled,
            "tokensRevoked": tokens_revoked,
        }
        await self._record(
            actor=actor,
            event_type="USER_DISABLED" if disabled else "USER_ENABLED",
            target_id=principal_id,
            details=detail,
        )
        return OperationResult(ref_id=principal_id, status=status, detail=detail)

    async def _run_steps(
        self, principal_id: str, actions: Mapping[Step, StepAction | None]
    ) -> StepReport:
        outcomes: dict[Step, StepOutcome] = {}
        errors: dict[Step, str] = {}
        halted = False

        for step, policy in DELETE_STEPS.items():
            action = actions.get(step)
            if action is None or halted:
                outcomes[step] = StepOutcome.skipped
                continue
            try:
                await call_with_retry(
                    action,
                    policy=self._retry if policy.retry else SINGLE_ATTEMPT,
                    operation=step.value,
                )
            except Exception as e:
                # Any failure is recorded against its step; only the table decides whether
                # the sequence halts.
                message = e.message if isinstance(e, ServiceError) else str(e)
                outcomes[step] = StepOutcome.failed
                errors[step] = message
                emit = log.error if policy.fatal else log.warning
                emit(
                    "lifecycle_step_failed",
                    step=step.value,
                    principal_id=principal_id,
                    fatal=policy.fatal,
                    error=message,
                )
                halted = policy.fatal
                continue
            outcomes[step] = StepOutcome.succeeded
            log.info("lifecycle_step_succeeded", step=step.value, principal_id=principal_id)

        return StepReport(outcomes=outcomes, errors=errors)

    def _profile_cleanup_batch(self, principal_id: str) -> WriteBatch:
        batch = WriteBatch()
        for collection in self._profile_collections:
            batch.delete(collection, principal_id)
        return batch

    async def _record(self, **kwargs: Any) -> None:
        if self._audit is not None:
            await self._audit.record(**kwargs)


# --- Module Notes -----------------------------------------------------------
# Steps after a fatal failure are skipped: profile data is not wiped for a principal
# whose identity record still exists.
