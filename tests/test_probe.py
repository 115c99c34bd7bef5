"""
tests.test_probe

Session probe answers after delete / disable / provider-side removal.
"""

from __future__ import annotations

import pytest

from identity_admin.auth.verifier import TokenVerifier
from identity_admin.services.lifecycle import IdentityLifecycleManager, PrincipalRef
from identity_admin.services.probe import RevocationProbe, SignOutReason
from identity_admin.services.retry import RetryPolicy

ADMIN = "admin@example.com"


@pytest.fixture
def probe(identity, revocations) -> RevocationProbe:
    return RevocationProbe(
        verifier=TokenVerifier(identity), identity=identity, revocations=revocations
    )


@pytest.fixture
def manager(identity, documents, revocations) -> IdentityLifecycleManager:
    return IdentityLifecycleManager(
        identity=identity,
        documents=documents,
        revocations=revocations,
        retry_policy=RetryPolicy(max_attempts=1, base_delay=0.0, jitter=False),
    )


async def _signed_in(identity, email: str = "carol@example.com") -> tuple[str, str]:
    principal = await identity.create_principal(email=email)
    return principal.id, await identity.issue_token(principal.id)


@pytest.mark.asyncio
async def test_valid_session(identity, probe) -> None:
    uid, token = await _signed_in(identity)

    check = await probe.check_session(token)

    assert check.valid
    assert not check.should_sign_out
    assert check.reason is None
    assert check.principal_id == uid
    assert check.email == "carol@example.com"


@pytest.mark.asyncio
async def test_deleted_user_reports_user_deleted(identity, probe, manager) -> None:
    uid, token = await _signed_in(identity)

    await manager.delete_user(PrincipalRef.by_id(uid), actor=ADMIN)
    check = await probe.check_session(token)

    assert check.should_sign_out
    assert check.reason == SignOutReason.user_deleted
    assert check.message == "User account has been deleted"


@pytest.mark.asyncio
async def test_tombstone_wins_when_identity_delete_failed(identity, probe, manager) -> None:
    uid, token = await _signed_in(identity)
    identity.fail_delete_for.add(uid)

    result = await manager.delete_user(PrincipalRef.by_id(uid), actor=ADMIN)
    check = await probe.check_session(token)

    assert result.detail["identityDeleted"] is False
    assert await identity.get_principal(uid) is not None
    assert check.reason == SignOutReason.user_deleted


@pytest.mark.asyncio
async def test_disabled_user_reports_token_revoked(
    identity, probe, manager, revocations
) -> None:
    uid, token = await _signed_in(identity)

    await manager.toggle_status(uid, disabled=True, actor=ADMIN)
    check = await probe.check_session(token)

    assert check.reason == SignOutReason.token_revoked
    assert await revocations.get_tombstone(uid) is None


@pytest.mark.asyncio
async def test_revoked_token_stays_revoked_after_enable(identity, probe, manager) -> None:
    uid, token = await _signed_in(identity)
    await manager.toggle_status(uid, disabled=True, actor=ADMIN)
    await manager.toggle_status(uid, disabled=False, actor=ADMIN)

    check = await probe.check_session(token)

    assert check.reason == SignOutReason.token_revoked


@pytest.mark.asyncio
async def test_garbage_token_reports_token_revoked(probe) -> None:
    check = await probe.check_session("not-a-jwt")

    assert check.reason == SignOutReason.token_revoked
    assert check.principal_id is None


@pytest.mark.asyncio
async def test_removed_without_tombstone_reports_user_not_found(identity, probe) -> None:
    uid, token = await _signed_in(identity)
    # Removed directly at the provider, bypassing the deletion workflow.
    await identity.inner.delete_principal(uid)

    check = await probe.check_session(token)

    assert check.reason == SignOutReason.user_not_found


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer   "])
async def test_missing_bearer_reports_no_token(identity, probe, header) -> None:
    check = await probe.check_authorization(header)

    assert check.reason == SignOutReason.no_token
    assert check.message == "No token provided"
    assert identity.calls == []


@pytest.mark.asyncio
async def test_authorization_header_is_parsed(identity, probe) -> None:
    uid, token = await _signed_in(identity)

    check = await probe.check_authorization(f"Bearer {token}")

    assert check.valid
    assert check.principal_id == uid
